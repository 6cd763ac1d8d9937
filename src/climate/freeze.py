"""
Freeze/thaw intervals for sea ice and snow cover.

A cell whose annual temperature range straddles the freezing point is frozen
for part of the year. With ``p`` the position of the freezing point within
the cell's [min, max] temperature range:

- min >= freezing point: never frozen, (0, 0). A minimum exactly at the
  freezing point only touches it, so the frozen spell has no length
- max < freezing point: frozen all year, (0, 1)
- p >= 0.5: frozen all year
- otherwise freezing starts at ``1 - p/2`` and thaws at ``p`` (sea ice) or
  ``0.75 * p`` (snow cover), as proportions of the year

Southern hemisphere seasons are offset by half a year.
"""

import logging
from typing import Tuple, Union

import numpy as np

from src.climate.types import HumidityType
from src.config import SEAWATER_MELTING_POINT, WATER_MELTING_POINT
from src.surface.errors import check_shape
from src.surface.ranges import FreezeInterval, FreezeIntervalGrid
from src.utils.helpers import inverse_lerp

logger = logging.getLogger(__name__)

SEA_ICE = "ice"
SNOW_COVER = "snow"

# Thaw proportion relative to freeze position, by kind
THAW_FACTORS = {SEA_ICE: 1.0, SNOW_COVER: 0.75}


def freeze_intervals(
    temperature_min: Union[float, np.ndarray],
    temperature_max: Union[float, np.ndarray],
    latitude: Union[float, np.ndarray],
    freeze_point: float = SEAWATER_MELTING_POINT,
    kind: str = SEA_ICE,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Freeze start and thaw proportions for each cell.

    Args:
        temperature_min: Minimum annual temperature in K
        temperature_max: Maximum annual temperature in K
        latitude: Latitude in radians (negative is southern hemisphere)
        freeze_point: Freezing temperature in K
        kind: "ice" for sea ice or "snow" for snow cover

    Returns:
        Tuple of (start, finish) arrays broadcast to a common shape

    Raises:
        ValueError: If kind is unknown
    """
    if kind not in THAW_FACTORS:
        raise ValueError(f"Unknown freeze kind '{kind}', expected one of {list(THAW_FACTORS)}")

    temperature_min, temperature_max, latitude = np.broadcast_arrays(
        np.asarray(temperature_min, dtype=np.float64),
        np.asarray(temperature_max, dtype=np.float64),
        np.asarray(latitude, dtype=np.float64),
    )

    p = inverse_lerp(temperature_min, temperature_max, freeze_point)
    p = np.asarray(p, dtype=np.float64)

    with np.errstate(invalid="ignore"):
        never = (temperature_min >= freeze_point) | np.isnan(p)
        always = ~never & ((temperature_max < freeze_point) | (p >= 0.5))
        partial = ~never & ~always

        partial_start = 1.0 - p / 2
        partial_finish = THAW_FACTORS[kind] * p

        southern = latitude < 0
        partial_finish = np.where(southern, partial_finish + 0.5, partial_finish)
        partial_finish = np.where(partial_finish > 1, partial_finish - 1, partial_finish)
        partial_start = np.where(southern, partial_start - 0.5, partial_start)

    start = np.where(partial, partial_start, 0.0)
    finish = np.where(always, 1.0, np.where(partial, partial_finish, 0.0))

    return start, finish


def get_freeze_interval(
    temperature_min: float,
    temperature_max: float,
    latitude: float,
    freeze_point: float = SEAWATER_MELTING_POINT,
    kind: str = SEA_ICE,
) -> FreezeInterval:
    """
    Freeze interval for a single location.

    Examples:
        >>> get_freeze_interval(280.0, 290.0, 0.0, 273.15)
        FreezeInterval(start=0.0, finish=0.0)
        >>> get_freeze_interval(250.0, 260.0, 0.0, 273.15)
        FreezeInterval(start=0.0, finish=1.0)
    """
    start, finish = freeze_intervals(
        temperature_min, temperature_max, latitude, freeze_point, kind
    )
    return FreezeInterval(float(start), float(finish))


def sea_ice_grid(
    elevation: np.ndarray,
    temperature_min: np.ndarray,
    temperature_max: np.ndarray,
    latitude: np.ndarray,
    freeze_point: float = SEAWATER_MELTING_POINT,
) -> FreezeIntervalGrid:
    """Sea ice intervals. Only cells at or below sea level can freeze."""
    elevation = np.asarray(elevation, dtype=np.float64)
    check_shape("temperature minimum", np.asarray(temperature_min), elevation.shape)
    check_shape("temperature maximum", np.asarray(temperature_max), elevation.shape)

    start, finish = freeze_intervals(
        temperature_min, temperature_max, latitude, freeze_point, SEA_ICE
    )
    ocean = elevation <= 0
    return FreezeIntervalGrid(np.where(ocean, start, 0.0), np.where(ocean, finish, 0.0))


def snow_cover_grid(
    elevation: np.ndarray,
    humidity: np.ndarray,
    temperature_min: np.ndarray,
    temperature_max: np.ndarray,
    latitude: np.ndarray,
    freeze_point: float = WATER_MELTING_POINT,
) -> FreezeIntervalGrid:
    """Snow cover intervals. Only land cells wetter than Perarid can hold snow."""
    elevation = np.asarray(elevation, dtype=np.float64)
    humidity = np.asarray(humidity)
    check_shape("humidity", humidity, elevation.shape)
    check_shape("temperature minimum", np.asarray(temperature_min), elevation.shape)
    check_shape("temperature maximum", np.asarray(temperature_max), elevation.shape)

    start, finish = freeze_intervals(
        temperature_min, temperature_max, latitude, freeze_point, SNOW_COVER
    )
    eligible = (elevation > 0) & (humidity > HumidityType.PERARID)
    logger.debug(f"Snow cover eligible cells: {int(eligible.sum())}/{eligible.size}")
    return FreezeIntervalGrid(
        np.where(eligible, start, 0.0), np.where(eligible, finish, 0.0)
    )
