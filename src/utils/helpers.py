import logging
import sys
from typing import Optional, Union

import numpy as np

from src.config import DEFAULT_LOG_LEVEL

ArrayLike = Union[float, np.ndarray]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    logger_name: str = "src",
    log_file: Optional[str] = None,
    console_level: str = DEFAULT_LOG_LEVEL,
) -> logging.Logger:
    """
    Attach console and optional file handlers to a logger.

    Module loggers are children of the ``src`` logger, so configuring it once
    covers the whole package. Handlers from a previous call are replaced.

    Args:
        logger_name: Logger to configure (default: the package root)
        log_file: Optional path that receives DEBUG and above
        console_level: Level name for the stdout handler

    Returns:
        The configured logger
    """
    formatter = logging.Formatter(LOG_FORMAT)

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level.upper())
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> ArrayLike:
    """Linear interpolation between a and b. Works on scalars and arrays."""
    return a + (b - a) * t


def inverse_lerp(a: ArrayLike, b: ArrayLike, value: ArrayLike) -> ArrayLike:
    """
    Position of value between a and b as a proportion.

    A zero-width interval gives NaN (0/0) or +/-inf, which callers must handle.

    Args:
        a: Start of interval
        b: End of interval
        value: Value to locate

    Returns:
        (value - a) / (b - a), scalar if all inputs were scalar
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    value = np.asarray(value, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        result = (value - a) / (b - a)
    if result.ndim == 0:
        return float(result)
    return result
