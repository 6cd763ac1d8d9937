"""Tests for seasonal precipitation aggregation."""

import numpy as np
import pytest

from src.climate.precipitation import SeasonalGrid, SeasonalPrecipitation
from src.surface.errors import DimensionMismatch


class TestSeasonalGrid:
    def test_ranges(self):
        season = SeasonalGrid(
            np.array([[0.1, 0.3], [0.5, 0.7]]), np.array([[0.0, 0.0], [0.2, 0.2]])
        )
        assert season.precipitation_range.minimum == pytest.approx(0.1)
        assert season.precipitation_range.average == pytest.approx(0.4)
        assert season.precipitation_range.maximum == pytest.approx(0.7)
        assert season.snowfall_range.average == pytest.approx(0.1)

    def test_shape_mismatch(self):
        with pytest.raises(DimensionMismatch) as exc_info:
            SeasonalGrid(np.zeros((4, 2)), np.zeros((3, 2)))
        assert exc_info.value.name == "snowfall"

    def test_rejects_non_grid(self):
        with pytest.raises(ValueError, match="2D grid"):
            SeasonalGrid(np.zeros(4), np.zeros(4))

    def test_from_samples_normalizes(self):
        season = SeasonalGrid.from_samples(
            np.array([[150.0, 600.0]]), np.array([[130.0, 0.0]]), max_precipitation=300.0
        )
        np.testing.assert_allclose(season.precipitation, [[0.5, 1.0]])
        # 300 mm/year of rain corresponds to 3900 mm/year of snow
        np.testing.assert_allclose(season.snowfall, [[130.0 / 3900.0, 0.0]])

    def test_from_samples_rejects_nonpositive_max(self):
        with pytest.raises(ValueError):
            SeasonalGrid.from_samples(np.zeros((1, 1)), np.zeros((1, 1)), 0.0)

    def test_grids_are_read_only(self):
        season = SeasonalGrid(np.zeros((2, 2)), np.zeros((2, 2)))
        with pytest.raises(ValueError):
            season.precipitation[0, 0] = 1.0


class TestSeasonalPrecipitation:
    def test_totals_are_sums(self, seasons):
        precipitation = seasons((3, 2), precipitation=(0.1, 0.2, 0.3), snowfall=(0.0, 0.05, 0.1))
        np.testing.assert_allclose(precipitation.total_precipitation(), 0.6)
        np.testing.assert_allclose(precipitation.total_snowfall(), 0.15)
        assert precipitation.count == 3
        assert len(precipitation) == 3
        assert precipitation.shape == (3, 2)

    def test_per_season_ranges(self, seasons):
        precipitation = seasons((2, 2), precipitation=(0.1, 0.4))
        averages = [r.average for r in precipitation.precipitation_ranges]
        assert averages == pytest.approx([0.1, 0.4])
        assert len(precipitation.snowfall_ranges) == 2

    def test_physical_ranges(self, seasons):
        precipitation = seasons((4, 2), precipitation=(0.25, 0.25), snowfall=(0.01, 0.01))
        rain = precipitation.total_precipitation_range(300.0)
        snow = precipitation.total_snowfall_range(300.0)
        assert rain.average == pytest.approx(150.0)
        assert rain.minimum == pytest.approx(150.0)
        assert snow.average == pytest.approx(0.02 * 300.0 * 13)

    def test_season_shape_mismatch(self):
        first = SeasonalGrid(np.zeros((4, 2)), np.zeros((4, 2)))
        second = SeasonalGrid(np.zeros((4, 3)), np.zeros((4, 3)))
        with pytest.raises(DimensionMismatch) as exc_info:
            SeasonalPrecipitation([first, second])
        assert exc_info.value.name == "season 1"

    def test_requires_a_season(self):
        with pytest.raises(ValueError):
            SeasonalPrecipitation([])
