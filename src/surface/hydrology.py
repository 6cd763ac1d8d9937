"""
Surface hydrology derived from elevation and precipitation.

Each land cell drains to its lowest strictly-lower neighbour among the eight
surrounding cells (D8 routing). Longitude wraps around the planet; latitude
does not. Ocean cells and land pits drain to themselves. Because every step
goes strictly downhill, the drainage network has no cycles.

Runoff is annual precipitation over each cell's area, converted to m³/s and
accumulated downstream in topological order (Kahn's algorithm). Land pits
that receive inflow hold lakes, filled up to the lowest of their neighbours.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from src.config import DEFAULT_PLANET_RADIUS, SECONDS_PER_YEAR
from src.surface.errors import check_shape
from src.surface.projection import MapProjectionOptions, area_grid
from src.surface.ranges import readonly_array

logger = logging.getLogger(__name__)

# Millimetres to metres
_MM_TO_M = 0.001

_NEIGHBOUR_OFFSETS = [
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
]


@dataclass(frozen=True)
class HydrologyMaps:
    """Standing water and flow grids for one surface."""

    depth: np.ndarray
    """Lake depth above ground, in normalized elevation units."""

    flow: np.ndarray
    """Accumulated flow normalized to [0, 1] by max_flow."""

    max_flow: float
    """Largest accumulated flow in m³/s."""

    @classmethod
    def empty(cls, shape: Tuple[int, int]) -> "HydrologyMaps":
        return cls(
            depth=readonly_array(np.zeros(shape)),
            flow=readonly_array(np.zeros(shape)),
            max_flow=0.0,
        )

    @property
    def shape(self):
        return self.depth.shape

    def flow_rate(self) -> np.ndarray:
        """Accumulated flow in m³/s."""
        return self.flow * self.max_flow


def _neighbours(elevation: np.ndarray):
    """Yield (flat_index, elevation) grids for each of the eight neighbours."""
    width, height = elevation.shape
    xs, ys = np.meshgrid(np.arange(width), np.arange(height), indexing="ij")
    for dx, dy in _NEIGHBOUR_OFFSETS:
        nx = (xs + dx) % width
        ny = np.clip(ys + dy, 0, height - 1)
        yield nx * height + ny, elevation[nx, ny]


def compute_drainage(elevation: np.ndarray) -> np.ndarray:
    """
    Drainage destination of every cell.

    Args:
        elevation: Signed elevation grid (X, Y), sea level at 0

    Returns:
        int64 array (X, Y) of flat indices (x * Y + y) into the grid. Cells
        that do not drain anywhere hold their own index.
    """
    elevation = np.asarray(elevation, dtype=np.float64)
    width, height = elevation.shape
    own_index = np.arange(width * height, dtype=np.int64).reshape(width, height)

    lowest = elevation.copy()
    receivers = own_index.copy()
    for index, neighbour in _neighbours(elevation):
        lower = neighbour < lowest
        lowest = np.where(lower, neighbour, lowest)
        receivers = np.where(lower, index, receivers)

    return np.where(elevation > 0, receivers, own_index)


def accumulate_flow(receivers: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """
    Sum each cell's weight into every cell downstream of it.

    Args:
        receivers: Drainage destinations from compute_drainage
        weights: Per-cell contribution (e.g. runoff in m³/s)

    Returns:
        Float array (X, Y) of accumulated weights, each cell including itself

    Raises:
        RuntimeError: If the drainage network contains a cycle
    """
    shape = receivers.shape
    flat_receivers = receivers.ravel()
    n = flat_receivers.size
    accumulated = np.asarray(weights, dtype=np.float64).ravel().copy()

    drains = flat_receivers != np.arange(n)
    in_degree = np.bincount(flat_receivers[drains], minlength=n)

    # Cells with no contributors are processed first
    queue = deque(np.flatnonzero(in_degree == 0).tolist())
    processed = 0
    while queue:
        cell = queue.popleft()
        processed += 1
        if drains[cell]:
            receiver = flat_receivers[cell]
            accumulated[receiver] += accumulated[cell]
            in_degree[receiver] -= 1
            if in_degree[receiver] == 0:
                queue.append(receiver)

    if processed < n:
        raise RuntimeError(
            f"Cycle detected in drainage network! {n - processed} cells never "
            "reached in_degree 0."
        )
    return accumulated.reshape(shape)


def drainage_terminals(receivers: np.ndarray) -> np.ndarray:
    """Final drainage point (flat index) reached from every cell."""
    terminals = receivers.ravel().copy()
    while True:
        following = terminals[terminals]
        if np.array_equal(following, terminals):
            return terminals.reshape(receivers.shape)
        terminals = following


def lake_depths(elevation: np.ndarray, receivers: np.ndarray) -> np.ndarray:
    """
    Depth of standing water in land pits that receive inflow.

    Each such pit is filled to the elevation of its lowest neighbour. Every
    cell in the pit's catchment below that level is part of the lake.
    """
    elevation = np.asarray(elevation, dtype=np.float64)
    flat_elevation = elevation.ravel()
    n = flat_elevation.size
    flat_receivers = receivers.ravel()

    drains = flat_receivers != np.arange(n)
    has_inflow = np.bincount(flat_receivers[drains], minlength=n) > 0
    lake_bottom = (flat_elevation > 0) & ~drains & has_inflow

    # Clamped latitude makes a polar row its own neighbour; skip those
    own_index = np.arange(n).reshape(elevation.shape)
    rim = np.full(elevation.shape, np.inf)
    for index, neighbour in _neighbours(elevation):
        rim = np.where(index == own_index, rim, np.minimum(rim, neighbour))

    terminals = drainage_terminals(receivers).ravel()
    spill = rim.ravel()[terminals]
    in_lake = lake_bottom[terminals] & (flat_elevation < spill)

    depth = np.where(in_lake, spill - flat_elevation, 0.0)
    logger.debug(
        f"Found {int(lake_bottom.sum())} lakes covering {int(in_lake.sum())} cells"
    )
    return depth.reshape(elevation.shape)


def compute_hydrology(
    elevation: np.ndarray,
    total_precipitation: np.ndarray,
    max_precipitation: float,
    radius: float = DEFAULT_PLANET_RADIUS,
    options: Optional[MapProjectionOptions] = None,
    year_seconds: float = SECONDS_PER_YEAR,
) -> HydrologyMaps:
    """
    Derive lake depth and river flow for a surface.

    Args:
        elevation: Signed elevation grid (X, Y)
        total_precipitation: Normalized annual precipitation grid (X, Y)
        max_precipitation: Physical precipitation of a normalized 1, mm/year
        radius: Planet radius in metres
        options: Projection used to compute cell areas
        year_seconds: Length of the year in seconds

    Returns:
        HydrologyMaps

    Raises:
        DimensionMismatch: If precipitation and elevation differ in shape
    """
    elevation = np.asarray(elevation, dtype=np.float64)
    total_precipitation = np.asarray(total_precipitation, dtype=np.float64)
    check_shape("total precipitation", total_precipitation, elevation.shape)

    width, height = elevation.shape
    areas = area_grid(radius, height, options)
    if areas.shape != elevation.shape:
        # Aspect ratio differs from the projection's; area depends only on row
        areas = np.broadcast_to(areas[:1, :], elevation.shape)

    runoff = total_precipitation * max_precipitation * _MM_TO_M * areas / year_seconds

    receivers = compute_drainage(elevation)
    accumulated = accumulate_flow(receivers, runoff)
    depth = lake_depths(elevation, receivers)

    max_flow = float(accumulated.max()) if accumulated.size else 0.0
    flow = accumulated / max_flow if max_flow > 0 else np.zeros_like(accumulated)

    logger.info(f"Hydrology: max flow {max_flow:.3g} m³/s over {width}x{height} grid")

    return HydrologyMaps(
        depth=readonly_array(depth),
        flow=readonly_array(flow),
        max_flow=max_flow,
    )
