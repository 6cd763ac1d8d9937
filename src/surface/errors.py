"""Exceptions raised while building or transforming surface maps."""

from typing import Optional, Tuple


class SurfaceMapError(Exception):
    """Base class for surface map errors."""
    pass


class DimensionMismatch(SurfaceMapError, ValueError):
    """Raised when paired grids do not share the same shape."""

    def __init__(
        self,
        name: str,
        expected: Tuple[int, ...],
        actual: Tuple[int, ...],
        message: Optional[str] = None,
    ):
        self.name = name
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        if message is None:
            message = (
                f"Dimensions of {name} {self.actual} do not match "
                f"expected {self.expected}"
            )
        super().__init__(message)


class OutOfRange(SurfaceMapError, ValueError):
    """Raised when a resolution or index exceeds what the projection supports."""
    pass


def check_shape(name: str, array, expected: Tuple[int, ...]) -> None:
    """Raise DimensionMismatch if array's shape differs from expected."""
    if tuple(array.shape) != tuple(expected):
        raise DimensionMismatch(name, expected, array.shape)
