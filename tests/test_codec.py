"""Tests for grid <-> image conversion."""

import numpy as np
import pytest
from PIL import Image

from src.surface.codec import (
    bytes_to_image,
    biome_map_to_image,
    composite,
    decode_values,
    elevation_map_to_image,
    encode_values,
    grid_to_image,
    image_to_bytes,
    image_to_grid,
    images_to_range_grid,
    precipitation_map_to_image,
    range_grid_to_images,
    read_grid,
    render,
    resize_grid,
    temperature_map_to_image,
)
from src.surface.errors import DimensionMismatch
from src.surface.hill_shading import HillShadingOptions
from src.surface.ranges import RangeGrid


class TestGrayscaleCodec:
    def test_encode_rounds_and_clamps(self):
        encoded = encode_values(np.array([0.0, 0.5, 1.0, -0.5, 1.5]))
        assert encoded.tolist() == [0, 128, 255, 0, 255]

    def test_signed_encoding_maps_zero_to_middle(self):
        encoded = encode_values(np.array([-1.0, 0.0, 1.0]), signed=True)
        assert encoded.tolist() == [0, 128, 255]

    def test_decode_averages_channels(self):
        values = decode_values(np.array([[255, 0, 0], [255, 255, 255]]))
        np.testing.assert_allclose(values, [1 / 3, 1.0])

    def test_round_trip_within_one_step(self):
        rng = np.random.default_rng(0)
        grid = rng.random((16, 8))
        decoded = image_to_grid(grid_to_image(grid))
        assert np.max(np.abs(decoded - grid)) <= 1 / 255

    def test_signed_round_trip(self):
        rng = np.random.default_rng(1)
        grid = rng.uniform(-1, 1, (10, 5))
        decoded = image_to_grid(grid_to_image(grid, signed=True), signed=True)
        assert np.max(np.abs(decoded - grid)) <= 2 / 255

    def test_image_is_x_wide_and_y_high(self):
        grid = np.zeros((4, 2))
        grid[3, 1] = 1.0
        image = grid_to_image(grid)
        assert image.size == (4, 2)
        assert image.mode == "RGB"
        assert image.getpixel((3, 1)) == (255, 255, 255)
        assert image.getpixel((1, 1)) == (0, 0, 0)

    def test_reads_other_modes(self):
        gray = Image.new("L", (3, 2), color=255)
        np.testing.assert_allclose(image_to_grid(gray), np.ones((3, 2)))

        rgba = Image.new("RGBA", (3, 2), color=(0, 0, 0, 255))
        np.testing.assert_allclose(image_to_grid(rgba), np.zeros((3, 2)))

    def test_decode_with_target_size(self):
        image = grid_to_image(np.full((4, 2), 0.6))
        grid = image_to_grid(image, width=8, height=4)
        assert grid.shape == (8, 4)
        np.testing.assert_allclose(grid, 153 / 255, atol=1e-6)

    def test_rejects_non_grid(self):
        with pytest.raises(ValueError):
            grid_to_image(np.zeros(5))

    def test_read_grid_from_file(self, tmp_path):
        path = tmp_path / "grid.png"
        grid_to_image(np.full((5, 3), 1.0)).save(path)
        np.testing.assert_allclose(read_grid(path), 1.0)


class TestRangePairs:
    def test_round_trip(self):
        ranges = RangeGrid.from_bounds(np.full((4, 2), 0.2), np.full((4, 2), 0.8))
        min_image, max_image = range_grid_to_images(ranges)
        decoded = images_to_range_grid(min_image, max_image)
        np.testing.assert_allclose(decoded.minimum, 0.2, atol=1 / 255)
        np.testing.assert_allclose(decoded.maximum, 0.8, atol=1 / 255)
        np.testing.assert_allclose(decoded.average, 0.5, atol=1 / 255)

    def test_scaled_round_trip(self):
        ranges = RangeGrid.from_bounds(np.full((2, 2), 250.0), np.full((2, 2), 300.0))
        images = range_grid_to_images(ranges, scale=400.0)
        decoded = images_to_range_grid(*images, scale=400.0)
        np.testing.assert_allclose(decoded.maximum, 300.0, atol=400 / 255)

    def test_missing_max_is_degenerate(self):
        min_image = grid_to_image(np.full((3, 2), 0.4))
        decoded = images_to_range_grid(min_image=min_image)
        np.testing.assert_array_equal(decoded.minimum, decoded.maximum)
        np.testing.assert_array_equal(decoded.average, decoded.minimum)

    def test_missing_min_is_degenerate(self):
        max_image = grid_to_image(np.full((3, 2), 0.4))
        decoded = images_to_range_grid(max_image=max_image)
        np.testing.assert_array_equal(decoded.minimum, decoded.maximum)

    def test_both_missing_raises(self):
        with pytest.raises(ValueError):
            images_to_range_grid()

    def test_max_image_resized_to_min(self):
        min_image = grid_to_image(np.full((4, 2), 0.2))
        max_image = grid_to_image(np.full((8, 4), 0.8))
        decoded = images_to_range_grid(min_image, max_image)
        assert decoded.shape == (4, 2)
        np.testing.assert_allclose(decoded.maximum, 0.8, atol=1 / 255)


class TestComposite:
    def test_unsigned(self):
        result = composite(np.full((2, 2), 0.25), np.full((2, 2), 0.5))
        np.testing.assert_allclose(result, 0.75)

    def test_signed_overlay_is_doubled(self):
        result = composite(np.full((2, 2), 0.25), np.full((2, 2), 0.5), signed=True)
        np.testing.assert_allclose(result, 1.25)

    def test_mismatch(self):
        with pytest.raises(DimensionMismatch):
            composite(np.zeros((4, 2)), np.zeros((3, 2)))


class TestResize:
    def test_constant_grid_stays_constant(self):
        result = resize_grid(np.full((8, 4), 0.3), 16, 8)
        assert result.shape == (16, 8)
        np.testing.assert_allclose(result, 0.3, atol=1e-9)

    def test_downsample(self):
        result = resize_grid(np.full((16, 8), 0.7), 4, 2)
        assert result.shape == (4, 2)
        np.testing.assert_allclose(result, 0.7, atol=1e-9)

    def test_same_size_is_copy(self):
        grid = np.arange(8, dtype=float).reshape(4, 2)
        result = resize_grid(grid, 4, 2)
        np.testing.assert_array_equal(result, grid)
        assert result is not grid

    def test_longitude_wraps(self):
        grid = np.zeros((8, 4))
        grid[0, :] = 1.0
        result = resize_grid(grid, 16, 4)
        # The last column sits next to column 0 across the wrap
        assert result[-1, 1] > result[8, 1]

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            resize_grid(np.zeros((4, 2)), 0, 2)


class TestByteBuffers:
    def test_png_round_trip(self):
        image = grid_to_image(np.linspace(0, 1, 12).reshape(4, 3))
        restored = bytes_to_image(image_to_bytes(image))
        assert restored.size == image.size
        assert np.array_equal(np.asarray(restored), np.asarray(image))

    def test_detached_image_usable(self):
        data = image_to_bytes(grid_to_image(np.zeros((2, 2))), format="PNG")
        image = bytes_to_image(data)
        assert image.getpixel((0, 0)) == (0, 0, 0)


class TestRenderers:
    def test_elevation(self):
        elevation = np.array([[-1.0, 0.0], [0.4, 1.0]])
        image = elevation_map_to_image(elevation)
        assert image.size == (2, 2)
        assert image.getpixel((0, 0)) == (42, 72, 84)
        assert image.getpixel((1, 0)) == (144, 137, 109)

    def test_temperature_uses_celsius(self):
        image = temperature_map_to_image(np.full((2, 2), 273.15))
        assert image.getpixel((0, 0)) == (30, 210, 200)

    def test_precipitation(self):
        image = precipitation_map_to_image(np.full((3, 2), 0.005))
        assert image.getpixel((2, 1)) == (200, 215, 100)

    def test_biome(self):
        from src.climate.types import BiomeType

        image = biome_map_to_image(np.full((2, 2), int(BiomeType.SEA)))
        assert image.getpixel((1, 1)) == (2, 5, 20)

    def test_hill_shading_applied(self):
        elevation = np.full((5, 5), 0.5)
        plain = elevation_map_to_image(elevation)
        shaded = elevation_map_to_image(elevation, HillShadingOptions())
        # Edges are untouched, interior darkens on flat ground
        assert shaded.getpixel((0, 0)) == plain.getpixel((0, 0))
        assert sum(shaded.getpixel((2, 2))) < sum(plain.getpixel((2, 2)))

    def test_render_with_matplotlib_name(self):
        image = render(np.random.default_rng(0).random((6, 3)), "viridis")
        assert image.size == (6, 3)
