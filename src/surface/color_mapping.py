"""
Color ramps for rendering surface grids.

A ColorRamp is an ordered list of (threshold, RGB) control points. Values
between two thresholds are linearly interpolated per channel and truncated to
a byte; values outside the ramp take the nearest end color. Named ramps are
provided for elevation, precipitation and temperature, and each is also
registered with matplotlib so it can be used anywhere a colormap name is
accepted.
"""

import logging
from typing import Dict, Optional, Sequence, Tuple, Union

import matplotlib
import numpy as np
from matplotlib.colors import LinearSegmentedColormap

from src.climate.types import BiomeType

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


class ColorRamp:
    """
    Piecewise linear mapping from scalar values to RGB bytes.

    Args:
        points: Sequence of (threshold, (r, g, b)) with strictly increasing
            thresholds
        name: Optional name used when registering with matplotlib

    Raises:
        ValueError: If points is empty or thresholds are not strictly increasing

    Examples:
        >>> ramp = ColorRamp([(0.0, (0, 0, 0)), (1.0, (255, 255, 255))])
        >>> ramp(np.array([0.5])).tolist()
        [[127, 127, 127]]
    """

    def __init__(self, points: Sequence[Tuple[float, RGB]], name: Optional[str] = None):
        if len(points) == 0:
            raise ValueError("A color ramp needs at least one control point")

        thresholds = np.array([p[0] for p in points], dtype=np.float64)
        if np.any(np.diff(thresholds) <= 0):
            raise ValueError(f"Ramp thresholds must be strictly increasing: {thresholds}")

        colors = np.array([p[1] for p in points], dtype=np.float64)
        if colors.shape != (len(points), 3) or colors.min() < 0 or colors.max() > 255:
            raise ValueError("Ramp colors must be (r, g, b) tuples of bytes")

        self.thresholds = thresholds
        self.colors = colors
        self.name = name

    def __len__(self) -> int:
        return len(self.thresholds)

    def __call__(self, values: Union[float, np.ndarray]) -> np.ndarray:
        """
        Map values to colors.

        Args:
            values: Scalar or array of values. NaN maps to the first color.

        Returns:
            uint8 array with shape values.shape + (3,)
        """
        values = np.asarray(values, dtype=np.float64)
        values = np.where(np.isnan(values), self.thresholds[0], values)

        out = np.empty(values.shape + (3,), dtype=np.uint8)
        for channel in range(3):
            # np.interp clamps to the end colors outside the thresholds
            interpolated = np.interp(values, self.thresholds, self.colors[:, channel])
            out[..., channel] = np.clip(np.floor(interpolated), 0, 255).astype(np.uint8)
        return out

    def to_colormap(self, name: Optional[str] = None, N: int = 256) -> LinearSegmentedColormap:
        """
        Export as a matplotlib colormap over the ramp's normalized threshold span.

        A single-point ramp becomes a constant colormap.
        """
        name = name or self.name or "color_ramp"
        colors = self.colors / 255.0
        if len(self) == 1:
            return LinearSegmentedColormap.from_list(name, [colors[0], colors[0]], N=N)
        span = self.thresholds[-1] - self.thresholds[0]
        positions = (self.thresholds - self.thresholds[0]) / span
        return LinearSegmentedColormap.from_list(
            name, list(zip(positions, [tuple(c) for c in colors])), N=N
        )


# =============================================================================
# Named Ramps
# =============================================================================

# Signed elevation in [-1, 1]: bathymetric blues below sea level, hypsometric
# tints above. Control points are dense near 0 so coastlines stay visible.
ELEVATION_RAMP = ColorRamp(
    [
        (-1.0, (42, 72, 84)),
        (-0.36, (146, 208, 233)),
        (-0.3, (160, 209, 242)),
        (-0.2, (168, 218, 243)),
        (-0.09, (180, 220, 245)),
        (-0.045, (186, 228, 250)),
        (-0.02, (199, 230, 250)),
        (-0.009, (210, 238, 252)),
        (-0.00001, (221, 241, 252)),
        (0.0, (255, 255, 255)),
        (0.00001, (179, 193, 168)),
        (0.006, (156, 180, 146)),
        (0.01, (175, 192, 158)),
        (0.02, (194, 204, 169)),
        (0.06, (211, 216, 184)),
        (0.12, (231, 231, 193)),
        (0.175, (249, 244, 214)),
        (0.235, (221, 216, 178)),
        (0.3, (196, 188, 149)),
        (0.35, (175, 158, 115)),
        (0.4, (144, 137, 109)),
        (0.47, (121, 112, 95)),
        (0.53, (95, 88, 80)),
        (0.59, (126, 114, 114)),
        (0.65, (152, 143, 144)),
        (0.7, (176, 170, 170)),
        (0.824, (203, 197, 197)),
        (0.94, (227, 225, 226)),
        (1.0, (255, 255, 255)),
    ],
    name="surface_elevation",
)

# Normalized precipitation in [0, 1], roughly doubling per step
PRECIPITATION_RAMP = ColorRamp(
    [
        (0.01, (200, 215, 100)),
        (0.021, (170, 200, 80)),
        (0.043, (95, 170, 40)),
        (0.085, (30, 160, 25)),
        (0.169, (15, 90, 35)),
        (0.337, (15, 90, 80)),
        (0.674, (5, 110, 75)),
    ],
    name="surface_precipitation",
)

# Temperature in degrees Celsius
TEMPERATURE_RAMP = ColorRamp(
    [
        (-60.0, (170, 170, 170)),
        (-40.0, (255, 255, 255)),
        (-30.0, (130, 10, 155)),
        (-20.0, (5, 30, 120)),
        (0.0, (30, 210, 200)),
        (5.0, (5, 165, 45)),
        (20.0, (225, 215, 0)),
        (30.0, (110, 5, 0)),
        (40.0, (50, 0, 0)),
    ],
    name="surface_temperature",
)

RAMPS: Dict[str, ColorRamp] = {
    "elevation": ELEVATION_RAMP,
    "precipitation": PRECIPITATION_RAMP,
    "temperature": TEMPERATURE_RAMP,
}

# Register the ramps with matplotlib
for _ramp in RAMPS.values():
    matplotlib.colormaps.register(_ramp.to_colormap(), force=True)


def get_ramp(name: str) -> ColorRamp:
    """Look up a named ramp. Raises KeyError listing the known names."""
    try:
        return RAMPS[name]
    except KeyError:
        raise KeyError(f"Unknown color ramp '{name}'. Available: {sorted(RAMPS)}") from None


def colorize(
    grid: np.ndarray,
    ramp: Union[str, ColorRamp] = "elevation",
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
) -> np.ndarray:
    """
    Map a grid to RGB colors.

    Args:
        grid: Array of values
        ramp: A ColorRamp, the name of a registered ramp, or any matplotlib
            colormap name
        vmin: Lower bound for matplotlib colormaps (default: data minimum)
        vmax: Upper bound for matplotlib colormaps (default: data maximum)

    Returns:
        uint8 array with shape grid.shape + (3,)
    """
    grid = np.asarray(grid, dtype=np.float64)

    if isinstance(ramp, ColorRamp):
        return ramp(grid)
    if ramp in RAMPS:
        return RAMPS[ramp](grid)

    logger.debug(f"Colorizing with matplotlib colormap '{ramp}'")
    cmap = matplotlib.colormaps[ramp]
    if vmin is None:
        vmin = np.nanmin(grid)
    if vmax is None:
        vmax = np.nanmax(grid)
    if vmax > vmin:
        normalized = (grid - vmin) / (vmax - vmin)
    else:
        normalized = np.zeros_like(grid)
    rgba = cmap(np.clip(np.nan_to_num(normalized), 0, 1))
    return (rgba[..., :3] * 255).astype(np.uint8)


# =============================================================================
# Biome Colors
# =============================================================================

BIOME_COLORS: Dict[BiomeType, RGB] = {
    BiomeType.POLAR: (238, 240, 241),
    BiomeType.TUNDRA: (165, 177, 174),
    BiomeType.LICHEN_WOODLAND: (29, 47, 14),
    BiomeType.CONIFEROUS_FOREST: (15, 23, 4),
    BiomeType.MIXED_FOREST: (34, 45, 15),
    BiomeType.STEPPE: (120, 84, 61),
    BiomeType.COLD_DESERT: (135, 122, 95),
    BiomeType.DECIDUOUS_FOREST: (40, 59, 19),
    BiomeType.SHRUBLAND: (135, 122, 95),
    BiomeType.HOT_DESERT: (203, 162, 108),
    BiomeType.SAVANNA: (61, 58, 28),
    BiomeType.MONSOON_FOREST: (31, 50, 13),
    BiomeType.RAIN_FOREST: (25, 48, 9),
    BiomeType.SEA: (2, 5, 20),
}

# Unmapped biomes (including NONE and flag combinations)
BIOME_FALLBACK: RGB = (128, 128, 128)


def biome_colors(biomes: np.ndarray) -> np.ndarray:
    """
    Map a grid of BiomeType values to RGB colors.

    Returns:
        uint8 array with shape biomes.shape + (3,)
    """
    biomes = np.asarray(biomes)
    out = np.empty(biomes.shape + (3,), dtype=np.uint8)
    out[...] = BIOME_FALLBACK
    for biome, color in BIOME_COLORS.items():
        out[biomes == int(biome)] = color
    return out
