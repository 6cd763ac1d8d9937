"""
Equirectangular projection between grid indices and geographic coordinates.

Grids are stored X-major: ``grid[x, y]`` with x along longitude and y along
latitude. A projection at ``resolution`` N spans ``N * aspect_ratio`` columns
and N rows. Indices are centred before projecting, so column ``X // 2`` sits on
the central meridian and row ``N // 2`` on the central parallel.

Scale (radians per cell) is ``pi / N`` for a whole-planet map, or
``pi**2 / (N * angular_range)`` when the map covers a narrower angular range.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

import numpy as np

from src.config import MAX_RESOLUTION
from src.surface.errors import OutOfRange

logger = logging.getLogger(__name__)

IndexLike = Union[int, np.ndarray]


@dataclass(frozen=True)
class MapProjectionOptions:
    """
    Parameters of an equirectangular map projection.

    All angles are in radians.
    """

    central_meridian: float = 0.0
    """Longitude at the horizontal centre of the map."""

    central_parallel: float = 0.0
    """Latitude at the vertical centre of the map."""

    standard_parallels: Optional[float] = None
    """Parallel of true scale. Defaults to the central parallel."""

    angular_range: Optional[float] = None
    """Angular extent covered by the map. None means the whole planet."""

    aspect_ratio: float = 2.0
    """Ratio of columns to rows."""

    @property
    def reference_parallel(self) -> float:
        if self.standard_parallels is None:
            return self.central_parallel
        return self.standard_parallels


DEFAULT_OPTIONS = MapProjectionOptions()


def validate_resolution(resolution: int) -> None:
    """Raise OutOfRange if resolution cannot be projected."""
    if resolution > MAX_RESOLUTION:
        raise OutOfRange(
            f"Resolution {resolution} exceeds the maximum of {MAX_RESOLUTION}"
        )
    if resolution < 1:
        raise OutOfRange(f"Resolution must be at least 1, got {resolution}")


def get_scale(resolution: int, angular_range: Optional[float] = None) -> float:
    """
    Radians spanned by one grid cell.

    Args:
        resolution: Number of rows in the map
        angular_range: Angular extent of the map, or None for the whole planet

    Returns:
        pi**2 / (resolution * angular_range) for a partial map, pi / resolution
        otherwise
    """
    if angular_range is not None and angular_range != 0 and angular_range < math.pi:
        return math.pi ** 2 / (resolution * angular_range)
    return math.pi / resolution


def grid_shape(
    resolution: int, options: Optional[MapProjectionOptions] = None
) -> Tuple[int, int]:
    """(X, Y) shape of a map at the given resolution."""
    options = options or DEFAULT_OPTIONS
    validate_resolution(resolution)
    return int(resolution * options.aspect_ratio), resolution


def get_lat_lon(
    x: IndexLike,
    y: IndexLike,
    resolution: int,
    options: Optional[MapProjectionOptions] = None,
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    """
    Convert grid indices to (latitude, longitude) in radians.

    Args:
        x: Column index (0 <= x < X), scalar or array
        y: Row index (0 <= y < resolution), scalar or array
        resolution: Map resolution
        options: Projection options (default: whole planet, no offsets)

    Returns:
        Tuple of (latitude, longitude). Scalars if inputs were scalar.

    Raises:
        OutOfRange: If resolution is too large to project
    """
    options = options or DEFAULT_OPTIONS
    width, height = grid_shape(resolution, options)
    scale = get_scale(resolution, options.angular_range)

    adjusted_x = np.asarray(x, dtype=np.float64) - width // 2
    adjusted_y = np.asarray(y, dtype=np.float64) - height // 2

    latitude = adjusted_y * scale + options.central_parallel
    longitude = (
        adjusted_x * scale / math.cos(options.reference_parallel)
        + options.central_meridian
    )

    # Return scalar if input was scalar
    if latitude.ndim == 0 and longitude.ndim == 0:
        return float(latitude), float(longitude)
    return latitude, longitude


def get_xy(
    latitude: Union[float, np.ndarray],
    longitude: Union[float, np.ndarray],
    resolution: int,
    options: Optional[MapProjectionOptions] = None,
) -> Tuple[IndexLike, IndexLike]:
    """
    Convert (latitude, longitude) in radians to the nearest grid indices.

    Coordinates outside the map are clamped to its edge.

    Returns:
        Tuple of (x, y) indices. Ints if inputs were scalar.
    """
    options = options or DEFAULT_OPTIONS
    width, height = grid_shape(resolution, options)
    scale = get_scale(resolution, options.angular_range)

    latitude = np.asarray(latitude, dtype=np.float64)
    longitude = np.asarray(longitude, dtype=np.float64)

    adjusted_x = np.round(
        (longitude - options.central_meridian)
        * math.cos(options.reference_parallel)
        / scale
    )
    adjusted_y = np.round((latitude - options.central_parallel) / scale)

    x = np.clip(adjusted_x + width // 2, 0, width - 1).astype(np.int64)
    y = np.clip(adjusted_y + height // 2, 0, height - 1).astype(np.int64)

    if x.ndim == 0 and y.ndim == 0:
        return int(x), int(y)
    return x, y


def lat_lon_grids(
    resolution: int, options: Optional[MapProjectionOptions] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Latitude and longitude of every cell as two (X, Y) arrays."""
    width, height = grid_shape(resolution, options)
    xs, ys = np.meshgrid(np.arange(width), np.arange(height), indexing="ij")
    return get_lat_lon(xs, ys, resolution, options)


def get_surface_map(
    func: Callable,
    resolution: int,
    options: Optional[MapProjectionOptions] = None,
    vectorized: bool = False,
    dtype=np.float64,
) -> np.ndarray:
    """
    Build a grid by evaluating func(latitude, longitude) at every cell.

    Args:
        func: Callable taking (latitude, longitude) in radians
        resolution: Map resolution
        options: Projection options
        vectorized: If True, call func once with full coordinate arrays
        dtype: Output dtype

    Returns:
        Array of shape (X, Y)

    Examples:
        >>> grid = get_surface_map(lambda lat, lon: lat, 4)
        >>> grid.shape
        (8, 4)
    """
    width, height = grid_shape(resolution, options)
    latitude, longitude = lat_lon_grids(resolution, options)
    logger.debug(f"Building surface map {width}x{height}")

    if vectorized:
        result = np.asarray(func(latitude, longitude), dtype=dtype)
        if result.shape != (width, height):
            result = np.broadcast_to(result, (width, height)).astype(dtype)
        return result

    result = np.empty((width, height), dtype=dtype)
    for x in range(width):
        for y in range(height):
            result[x, y] = func(float(latitude[x, y]), float(longitude[x, y]))
    return result


def get_area_of_point(
    radius: float,
    x: IndexLike,
    y: IndexLike,
    resolution: int,
    options: Optional[MapProjectionOptions] = None,
) -> Union[float, np.ndarray]:
    """
    Surface area of the cell at (x, y) on a sphere of the given radius.

    The cell is bounded by the parallels and meridians halfway to its
    neighbours; latitude borders are clamped to the poles.

    Returns:
        Area in units of radius squared. Scalar if inputs were scalar.
    """
    options = options or DEFAULT_OPTIONS
    scale = get_scale(resolution, options.angular_range)
    latitude, _ = get_lat_lon(x, y, resolution, options)
    latitude = np.asarray(latitude, dtype=np.float64)

    top = np.clip(latitude - scale / 2, -math.pi / 2, math.pi / 2)
    bottom = np.clip(latitude + scale / 2, -math.pi / 2, math.pi / 2)
    lon_width = scale / math.cos(options.reference_parallel)

    area = radius ** 2 * np.abs(np.sin(bottom) - np.sin(top)) * abs(lon_width)

    # Return scalar if input was scalar
    if area.ndim == 0:
        return float(area)
    return area


def area_grid(
    radius: float, resolution: int, options: Optional[MapProjectionOptions] = None
) -> np.ndarray:
    """Area of every cell as an (X, Y) array."""
    width, height = grid_shape(resolution, options)
    xs, ys = np.meshgrid(np.arange(width), np.arange(height), indexing="ij")
    return get_area_of_point(radius, xs, ys, resolution, options)
