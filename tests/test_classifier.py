"""Tests for per-cell and area-wide climate classification."""

import math

import numpy as np
import pytest

from src.climate.classifier import classify_climate, latitude_grid
from src.climate.types import BiomeType, ClimateType, EcologyType, HumidityType
from src.surface.errors import DimensionMismatch
from src.surface.ranges import FreezeInterval

MAX_PRECIPITATION = 300.0


@pytest.fixture
def classification(small_elevation, temperature_ranges, seasons):
    return classify_climate(
        small_elevation,
        temperature_ranges((4, 2)),
        seasons((4, 2)),
        MAX_PRECIPITATION,
    )


class TestLatitudeGrid:
    def test_rows(self):
        latitude = latitude_grid((4, 2))
        np.testing.assert_allclose(latitude[:, 0], -math.pi / 2)
        np.testing.assert_allclose(latitude[:, 1], 0.0)

    def test_independent_of_width(self):
        np.testing.assert_allclose(latitude_grid((3, 4))[0], latitude_grid((8, 4))[0])


class TestCellClassification:
    def test_climate_and_humidity(self, classification):
        assert np.all(classification.grids.climate == ClimateType.COOL_TEMPERATE)
        # 0.5 of 300 mm/year
        assert np.all(classification.grids.humidity == HumidityType.PERARID)

    def test_biome_and_ecology(self, classification):
        biome = classification.grids.biome
        ecology = classification.grids.ecology
        assert np.all(biome[2, :] == BiomeType.COLD_DESERT)
        assert np.all(ecology[2, :] == EcologyType.DESERT_SCRUB)
        for x in (0, 1, 3):
            assert np.all(biome[x, :] == BiomeType.SEA)
            assert np.all(ecology[x, :] == EcologyType.SEA)

    def test_totals(self, classification):
        np.testing.assert_allclose(classification.total_precipitation, 0.5)
        np.testing.assert_allclose(classification.total_snowfall, 0.02)

    def test_grids_are_read_only(self, classification):
        with pytest.raises(ValueError):
            classification.grids.biome[0, 0] = 0


class TestFreezeMaps:
    def test_sea_ice_by_hemisphere(self, classification):
        p = (271.35 - 270.0) / 20.0
        north = classification.sea_ice.at(1, 1)
        south = classification.sea_ice.at(1, 0)
        assert north.start == pytest.approx(1 - p / 2)
        assert north.finish == pytest.approx(p)
        assert south.start == pytest.approx(0.5 - p / 2)
        assert south.finish == pytest.approx(p + 0.5)

    def test_no_sea_ice_on_land(self, classification):
        assert classification.sea_ice.at(2, 0) == FreezeInterval.NEVER

    def test_no_snow_on_dry_land(self, classification):
        assert not classification.snow_cover.active_at(0.0).any()

    def test_snow_on_moist_land(self, small_elevation, temperature_ranges, seasons):
        result = classify_climate(
            small_elevation,
            temperature_ranges((4, 2)),
            seasons((4, 2), precipitation=(1.0, 1.0)),
            MAX_PRECIPITATION,
        )
        p = (273.15 - 270.0) / 20.0
        north = result.snow_cover.at(2, 1)
        assert north.start == pytest.approx(1 - p / 2)
        assert north.finish == pytest.approx(0.75 * p)
        assert result.snow_cover.at(0, 1) == FreezeInterval.NEVER


class TestAreaClassification:
    def test_summary_ranges(self, classification):
        assert classification.temperature_range.as_tuple() == pytest.approx((270.0, 280.0, 290.0))
        assert classification.precipitation_range.average == pytest.approx(150.0)
        assert classification.snowfall_range.average == pytest.approx(0.02 * 300.0 * 13)

    def test_area_types(self, classification):
        assert classification.climate == ClimateType.COOL_TEMPERATE
        assert classification.humidity == HumidityType.PERARID
        # Mean elevation is below sea level
        assert classification.biome == BiomeType.SEA
        assert classification.ecology == EcologyType.SEA

    def test_average_elevation_override(self, small_elevation, temperature_ranges, seasons):
        result = classify_climate(
            small_elevation,
            temperature_ranges((4, 2)),
            seasons((4, 2)),
            MAX_PRECIPITATION,
            average_elevation=0.5,
        )
        assert result.biome == BiomeType.COLD_DESERT
        assert result.ecology == EcologyType.DESERT_SCRUB


class TestValidation:
    def test_temperature_mismatch(self, small_elevation, temperature_ranges, seasons):
        with pytest.raises(DimensionMismatch) as exc_info:
            classify_climate(
                small_elevation, temperature_ranges((3, 2)), seasons((4, 2)), MAX_PRECIPITATION
            )
        assert exc_info.value.name == "temperature"

    def test_precipitation_mismatch(self, small_elevation, temperature_ranges, seasons):
        with pytest.raises(DimensionMismatch) as exc_info:
            classify_climate(
                small_elevation, temperature_ranges((4, 2)), seasons((4, 3)), MAX_PRECIPITATION
            )
        assert exc_info.value.name == "precipitation"

    def test_latitude_mismatch(self, small_elevation, temperature_ranges, seasons):
        with pytest.raises(DimensionMismatch):
            classify_climate(
                small_elevation,
                temperature_ranges((4, 2)),
                seasons((4, 2)),
                MAX_PRECIPITATION,
                latitude=np.zeros((4, 3)),
            )
