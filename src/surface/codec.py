"""
Conversion between numeric grids and raster images.

Grids are X-major ``(X, Y)`` arrays; images are ``Y`` pixels high and ``X``
pixels wide, so pixel (column x, row y) holds grid cell ``[x, y]``.

Grayscale encoding stores a normalized value in [0, 1] (or a signed value in
[-1, 1], remapped to [0, 1]) as one luminance byte replicated to R, G and B.
Decoding averages the three channels, so any RGB image can be read back as a
grid. The encoding is lossy to within 1/255 of the original value.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image
from scipy import ndimage

from src.config import DEFAULT_IMAGE_FORMAT, WATER_MELTING_POINT
from src.surface.color_mapping import biome_colors, colorize, get_ramp
from src.surface.errors import check_shape
from src.surface.hill_shading import HillShadingOptions, apply_hill_shading
from src.surface.ranges import RangeGrid

logger = logging.getLogger(__name__)

# Padding around the grid before cubic resampling
_RESIZE_PAD = 3


# =============================================================================
# Pixel Access
# =============================================================================


def _read_rgb(image: Image.Image) -> np.ndarray:
    """Pixels of any image mode as an X-major uint8 (X, Y, 3) array."""
    if image.mode != "RGB":
        image = image.convert("RGB")
    return np.asarray(image, dtype=np.uint8).transpose(1, 0, 2)


def _write_rgb(rgb: np.ndarray) -> Image.Image:
    """Build an RGB image from an X-major uint8 (X, Y, 3) array."""
    pixels = np.ascontiguousarray(np.asarray(rgb, dtype=np.uint8).transpose(1, 0, 2))
    return Image.fromarray(pixels)


# =============================================================================
# Grayscale Codec
# =============================================================================


def encode_values(grid: np.ndarray, signed: bool = False) -> np.ndarray:
    """
    Encode a grid to luminance bytes.

    Args:
        grid: Values in [0, 1], or [-1, 1] if signed
        signed: Whether values are signed

    Returns:
        uint8 array with the same shape. Out-of-range values are clamped.
    """
    grid = np.asarray(grid, dtype=np.float64)
    if signed:
        grid = (grid + 1) / 2
    return np.clip(np.round(grid * 255), 0, 255).astype(np.uint8)


def decode_values(rgb: np.ndarray, signed: bool = False) -> np.ndarray:
    """
    Decode (..., 3) color bytes to values by averaging channels.

    Returns:
        Float array in [0, 1], or [-1, 1] if signed
    """
    total = np.asarray(rgb, dtype=np.float64).sum(axis=-1)
    values = np.clip(total / 765.0, 0, 1)
    if signed:
        values = np.clip(values * 2 - 1, -1, 1)
    return values


def grid_to_image(grid: np.ndarray, signed: bool = False) -> Image.Image:
    """
    Encode a grid as a grayscale RGB image.

    Examples:
        >>> grid_to_image(np.zeros((4, 2))).size
        (4, 2)
    """
    grid = np.asarray(grid, dtype=np.float64)
    if grid.ndim != 2:
        raise ValueError(f"Expected a 2D grid, got shape {grid.shape}")
    luminance = encode_values(grid, signed)
    return _write_rgb(np.repeat(luminance[..., np.newaxis], 3, axis=-1))


def image_to_grid(
    image: Image.Image,
    signed: bool = False,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> np.ndarray:
    """
    Decode an image to a grid.

    Args:
        image: Any PIL image. Non-RGB modes are converted.
        signed: Decode to [-1, 1] instead of [0, 1]
        width: Target X size (default: image width)
        height: Target Y size (default: image height)

    Returns:
        Float array (width, height)
    """
    grid = decode_values(_read_rgb(image), signed)
    width = width or grid.shape[0]
    height = height or grid.shape[1]
    if (width, height) != grid.shape:
        low, high = (-1.0, 1.0) if signed else (0.0, 1.0)
        grid = np.clip(resize_grid(grid, width, height), low, high)
    return grid


def read_grid(path: Union[str, Path], signed: bool = False) -> np.ndarray:
    """Load an image file and decode it to a grid."""
    with Image.open(path) as image:
        return image_to_grid(image, signed)


# =============================================================================
# Range Pairs
# =============================================================================


def range_grid_to_images(
    ranges: RangeGrid, scale: float = 1.0, signed: bool = False
) -> Tuple[Image.Image, Image.Image]:
    """
    Encode per-cell ranges as a (minimum, maximum) image pair.

    Args:
        ranges: Per-cell ranges
        scale: Physical value of a normalized 1 (values are divided by it)
        signed: Whether normalized values are signed

    Returns:
        Tuple of (min_image, max_image)
    """
    return (
        grid_to_image(ranges.minimum / scale, signed),
        grid_to_image(ranges.maximum / scale, signed),
    )


def images_to_range_grid(
    min_image: Optional[Image.Image] = None,
    max_image: Optional[Image.Image] = None,
    scale: float = 1.0,
    signed: bool = False,
) -> RangeGrid:
    """
    Decode a (minimum, maximum) image pair to per-cell ranges.

    If only one image is given, every range is degenerate (minimum equals
    maximum). A maximum image of a different size is resized to match the
    minimum image.

    Raises:
        ValueError: If neither image is given
    """
    if min_image is None and max_image is None:
        raise ValueError("At least one of min_image and max_image is required")

    if min_image is None:
        maximum = image_to_grid(max_image, signed) * scale
        return RangeGrid.from_bounds(maximum, maximum)

    minimum = image_to_grid(min_image, signed) * scale
    if max_image is None:
        return RangeGrid.from_bounds(minimum, minimum)

    maximum = image_to_grid(max_image, signed, *minimum.shape) * scale
    # Encoding loss can leave a cell's maximum just below its minimum
    return RangeGrid.from_bounds(np.minimum(minimum, maximum), np.maximum(minimum, maximum))


# =============================================================================
# Composition and Resampling
# =============================================================================


def composite(base: np.ndarray, overlay: np.ndarray, signed: bool = False) -> np.ndarray:
    """
    Add an overlay grid onto a base grid.

    A signed overlay is doubled, so an overlay decoded from [0, 1] covers the
    full [-1, 1] span of the base.

    Raises:
        DimensionMismatch: If the grids differ in shape
    """
    base = np.asarray(base, dtype=np.float64)
    overlay = np.asarray(overlay, dtype=np.float64)
    check_shape("overlay", overlay, base.shape)
    return base + (2 * overlay if signed else overlay)


def resize_grid(grid: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Resample a grid to (width, height) with cubic interpolation.

    Longitude (axis 0) wraps around; latitude (axis 1) is padded by
    repeating the edge rows. Results are not clipped, so cubic overshoot can
    take values slightly outside the input range.
    """
    grid = np.asarray(grid, dtype=np.float64)
    in_width, in_height = grid.shape
    if (width, height) == (in_width, in_height):
        return grid.copy()
    if width < 1 or height < 1:
        raise ValueError(f"Target size must be positive, got {width}x{height}")

    logger.debug(f"Resizing grid {in_width}x{in_height} -> {width}x{height}")

    padded = np.pad(grid, ((_RESIZE_PAD, _RESIZE_PAD), (0, 0)), mode="wrap")
    padded = np.pad(padded, ((0, 0), (_RESIZE_PAD, _RESIZE_PAD)), mode="edge")

    xs = (np.arange(width) + 0.5) * in_width / width - 0.5 + _RESIZE_PAD
    ys = (np.arange(height) + 0.5) * in_height / height - 0.5 + _RESIZE_PAD
    coords = np.meshgrid(xs, ys, indexing="ij")

    return ndimage.map_coordinates(padded, coords, order=3, mode="nearest")


# =============================================================================
# Byte Buffers
# =============================================================================


def image_to_bytes(image: Image.Image, format: str = DEFAULT_IMAGE_FORMAT) -> bytes:
    """Serialize an image to an encoded byte buffer."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return buffer.getvalue()


def bytes_to_image(data: bytes) -> Image.Image:
    """Decode an encoded byte buffer into a detached image."""
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return image.copy()


# =============================================================================
# Renderers
# =============================================================================


def _shade(rgb, elevation, hill_shading):
    if hill_shading is None or elevation is None:
        return rgb
    return apply_hill_shading(rgb, elevation, hill_shading)


def elevation_map_to_image(
    elevation: np.ndarray, hill_shading: Optional[HillShadingOptions] = None
) -> Image.Image:
    """Render signed elevation with the elevation ramp."""
    rgb = colorize(elevation, get_ramp("elevation"))
    return _write_rgb(_shade(rgb, elevation, hill_shading))


def precipitation_map_to_image(
    precipitation: np.ndarray,
    elevation: Optional[np.ndarray] = None,
    hill_shading: Optional[HillShadingOptions] = None,
) -> Image.Image:
    """Render normalized precipitation with the precipitation ramp."""
    rgb = colorize(precipitation, get_ramp("precipitation"))
    return _write_rgb(_shade(rgb, elevation, hill_shading))


def temperature_map_to_image(
    temperature: np.ndarray,
    elevation: Optional[np.ndarray] = None,
    hill_shading: Optional[HillShadingOptions] = None,
) -> Image.Image:
    """Render temperature in K with the temperature ramp (thresholds in Celsius)."""
    celsius = np.asarray(temperature, dtype=np.float64) - WATER_MELTING_POINT
    rgb = colorize(celsius, get_ramp("temperature"))
    return _write_rgb(_shade(rgb, elevation, hill_shading))


def biome_map_to_image(
    biomes: np.ndarray,
    elevation: Optional[np.ndarray] = None,
    hill_shading: Optional[HillShadingOptions] = None,
) -> Image.Image:
    """Render a BiomeType grid with the discrete biome palette."""
    rgb = biome_colors(biomes)
    return _write_rgb(_shade(rgb, elevation, hill_shading))


def render(
    grid: np.ndarray,
    ramp: str,
    elevation: Optional[np.ndarray] = None,
    hill_shading: Optional[HillShadingOptions] = None,
) -> Image.Image:
    """Render any grid with a named ramp or matplotlib colormap."""
    rgb = colorize(grid, ramp)
    return _write_rgb(_shade(rgb, elevation, hill_shading))
