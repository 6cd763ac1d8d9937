"""
Hill shading for rendered surface maps.

Shades each pixel by the illumination of its terrain facet from a light
source at 45 degrees elevation in the north-west. Gradients use a 3x3 Sobel
kernel on the signed elevation grid, so edge cells are left unshaded.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

from src.surface.errors import check_shape

logger = logging.getLogger(__name__)

# Light source altitude and azimuth
_SIN_ALTITUDE = np.sin(np.pi / 4)
_ZENITH_AZIMUTH = 3 * np.pi / 4

# Sobel kernels for X-major grids: axis 0 is x, axis 1 is y
_KERNEL_X = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64) / 8.0
_KERNEL_Y = _KERNEL_X.T

_EPSILON = 1e-12


@dataclass
class HillShadingOptions:
    """Controls where and how strongly hill shading is applied."""

    apply_to_land: bool = True
    """Shade cells above sea level."""

    apply_to_ocean: bool = False
    """Shade cells at or below sea level."""

    scale_factor: float = 5.0
    """Vertical exaggeration of the gradient. Negative values become 0."""

    scale_is_relative: bool = True
    """If True, exaggeration grows with absolute elevation."""

    shade_multiplier: float = 1.25
    """Overall brightness multiplier. Negative values become 0."""

    def __post_init__(self):
        self.scale_factor = max(0.0, float(self.scale_factor))
        self.shade_multiplier = max(0.0, float(self.shade_multiplier))


def shade_factor(elevation: np.ndarray, options: HillShadingOptions) -> np.ndarray:
    """
    Per-cell brightness factor.

    Args:
        elevation: Signed elevation grid (X, Y) in [-1, 1]
        options: Hill shading options

    Returns:
        Float array (X, Y). Cells that are not shaded have a factor of 1.
    """
    elevation = np.asarray(elevation, dtype=np.float64)
    width, height = elevation.shape

    dzdx = np.clip(ndimage.correlate(elevation, _KERNEL_X, mode="nearest"), -1, 1)
    dzdy = np.clip(ndimage.correlate(elevation, _KERNEL_Y, mode="nearest"), -1, 1)

    scale = options.scale_factor
    if options.scale_is_relative:
        scale = scale * (1 + scale * np.abs(elevation))

    slope = np.arctan(scale * np.hypot(dzdx, dzdy))

    flat_x = np.abs(dzdx) < _EPSILON
    aspect = np.mod(np.arctan2(dzdy, -dzdx), 2 * np.pi)
    aspect_term = np.where(
        flat_x,
        np.where(dzdy > _EPSILON, _SIN_ALTITUDE ** 2, -(_SIN_ALTITUDE ** 2)),
        _SIN_ALTITUDE * np.cos(_ZENITH_AZIMUTH - aspect),
    )

    factor = (
        _SIN_ALTITUDE * np.cos(slope) + np.sin(slope) * aspect_term
    ) * options.shade_multiplier

    shaded = np.zeros(elevation.shape, dtype=bool)
    if width > 2 and height > 2:
        shaded[1:-1, 1:-1] = True
    land = elevation > 0
    if not options.apply_to_land:
        shaded &= ~land
    if not options.apply_to_ocean:
        shaded &= land

    return np.where(shaded, factor, 1.0)


def apply_hill_shading(
    rgb: np.ndarray, elevation: np.ndarray, options: HillShadingOptions
) -> np.ndarray:
    """
    Darken or brighten colors by the hill shading factor.

    Args:
        rgb: uint8 color grid (X, Y, 3)
        elevation: Signed elevation grid (X, Y)
        options: Hill shading options

    Returns:
        New uint8 color grid (X, Y, 3)

    Raises:
        DimensionMismatch: If the color grid and elevation differ in shape
    """
    rgb = np.asarray(rgb)
    elevation = np.asarray(elevation, dtype=np.float64)
    check_shape("elevation", elevation, rgb.shape[:2])

    factor = shade_factor(elevation, options)
    logger.debug(
        f"Hill shading factor range: {factor.min():.3f} to {factor.max():.3f}"
    )
    shaded = rgb.astype(np.float64) * factor[..., np.newaxis]
    return np.clip(shaded, 0, 255).astype(np.uint8)
