"""
Surface mapping package.

Core functionality:
- Equirectangular projection between grid indices and coordinates
- Range and freeze-interval value types shared by all grids
- Grid <-> image codec, color ramps and hill shading (codec, color_mapping)
- Hydrology, the SurfaceMapSet aggregate and snapshot storage
  (hydrology, surface_map, storage)

Only the dependency-free building blocks are re-exported here; import the
higher-level modules directly.
"""

from .errors import DimensionMismatch, OutOfRange, SurfaceMapError
from .ranges import FloatRange, FreezeInterval, FreezeIntervalGrid, RangeGrid
from .projection import (
    MapProjectionOptions,
    get_area_of_point,
    get_lat_lon,
    get_scale,
    get_surface_map,
    get_xy,
)

__all__ = [
    "DimensionMismatch",
    "OutOfRange",
    "SurfaceMapError",
    "FloatRange",
    "FreezeInterval",
    "FreezeIntervalGrid",
    "RangeGrid",
    "MapProjectionOptions",
    "get_area_of_point",
    "get_lat_lon",
    "get_scale",
    "get_surface_map",
    "get_xy",
]
