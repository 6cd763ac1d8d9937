"""Tests for climate, humidity, biome and ecology classification rules."""

import numpy as np
import pytest

from src.climate.types import (
    BiomeType,
    ClimateType,
    EcologyType,
    HumidityType,
    get_biome_type,
    get_climate_type,
    get_ecology_type,
    get_humidity_type,
)

MELT = 273.15


class TestClimateType:
    @pytest.mark.parametrize(
        "offset,expected",
        [
            (-50.0, ClimateType.POLAR),
            (1.5, ClimateType.POLAR),
            (2.0, ClimateType.SUBPOLAR),
            (5.0, ClimateType.BOREAL),
            (10.0, ClimateType.COOL_TEMPERATE),
            (15.0, ClimateType.WARM_TEMPERATE),
            (20.0, ClimateType.SUBTROPICAL),
            (30.0, ClimateType.TROPICAL),
            (68.0, ClimateType.TROPICAL),
            (100.0, ClimateType.SUPERTROPICAL),
        ],
    )
    def test_thresholds(self, offset, expected):
        assert get_climate_type(MELT + offset) == expected

    def test_scalar_returns_enum(self):
        assert isinstance(get_climate_type(280.0), ClimateType)

    def test_array(self):
        result = get_climate_type(np.array([[250.0, 280.0], [300.0, 400.0]]))
        assert result.dtype == np.int32
        np.testing.assert_array_equal(
            result,
            [
                [ClimateType.POLAR, ClimateType.COOL_TEMPERATE],
                [ClimateType.TROPICAL, ClimateType.SUPERTROPICAL],
            ],
        )


class TestHumidityType:
    @pytest.mark.parametrize(
        "precipitation,expected",
        [
            (0.0, HumidityType.SUPERARID),
            (124.9, HumidityType.SUPERARID),
            (125.0, HumidityType.PERARID),
            (249.0, HumidityType.PERARID),
            (250.0, HumidityType.ARID),
            (999.0, HumidityType.SEMIARID),
            (1500.0, HumidityType.SUBHUMID),
            (3000.0, HumidityType.HUMID),
            (7999.0, HumidityType.PERHUMID),
            (8000.0, HumidityType.SUPERHUMID),
        ],
    )
    def test_bands(self, precipitation, expected):
        assert get_humidity_type(precipitation) == expected

    def test_array(self):
        result = get_humidity_type(np.array([100.0, 600.0]))
        np.testing.assert_array_equal(result, [HumidityType.SUPERARID, HumidityType.SEMIARID])


class TestBiomeType:
    def test_sea_level_is_sea(self):
        assert get_biome_type(ClimateType.TROPICAL, HumidityType.HUMID, 0.0) == BiomeType.SEA
        assert get_biome_type(ClimateType.POLAR, HumidityType.ARID, -1.0) == BiomeType.SEA

    @pytest.mark.parametrize(
        "climate,humidity,expected",
        [
            (ClimateType.POLAR, HumidityType.HUMID, BiomeType.POLAR),
            (ClimateType.SUBPOLAR, HumidityType.ARID, BiomeType.TUNDRA),
            (ClimateType.BOREAL, HumidityType.PERARID, BiomeType.LICHEN_WOODLAND),
            (ClimateType.BOREAL, HumidityType.NONE, BiomeType.LICHEN_WOODLAND),
            (ClimateType.BOREAL, HumidityType.ARID, BiomeType.CONIFEROUS_FOREST),
            (ClimateType.COOL_TEMPERATE, HumidityType.PERARID, BiomeType.COLD_DESERT),
            (ClimateType.COOL_TEMPERATE, HumidityType.ARID, BiomeType.STEPPE),
            (ClimateType.COOL_TEMPERATE, HumidityType.SEMIARID, BiomeType.MIXED_FOREST),
            (ClimateType.WARM_TEMPERATE, HumidityType.SUPERARID, BiomeType.HOT_DESERT),
            (ClimateType.WARM_TEMPERATE, HumidityType.SEMIARID, BiomeType.SHRUBLAND),
            (ClimateType.WARM_TEMPERATE, HumidityType.SUBHUMID, BiomeType.DECIDUOUS_FOREST),
            (ClimateType.SUBTROPICAL, HumidityType.ARID, BiomeType.SAVANNA),
            (ClimateType.SUBTROPICAL, HumidityType.SUBHUMID, BiomeType.MONSOON_FOREST),
            (ClimateType.SUBTROPICAL, HumidityType.HUMID, BiomeType.RAIN_FOREST),
            (ClimateType.TROPICAL, HumidityType.SEMIARID, BiomeType.SAVANNA),
            (ClimateType.TROPICAL, HumidityType.SUBHUMID, BiomeType.MONSOON_FOREST),
            (ClimateType.TROPICAL, HumidityType.SUPERHUMID, BiomeType.RAIN_FOREST),
            (ClimateType.SUPERTROPICAL, HumidityType.HUMID, BiomeType.HOT_DESERT),
            (ClimateType.NONE, HumidityType.HUMID, BiomeType.HOT_DESERT),
        ],
    )
    def test_land_rules(self, climate, humidity, expected):
        assert get_biome_type(climate, humidity, 0.5) == expected

    def test_array(self):
        climate = np.array([ClimateType.POLAR, ClimateType.TROPICAL])
        humidity = np.array([HumidityType.ARID, HumidityType.HUMID])
        elevation = np.array([0.3, -0.3])
        result = get_biome_type(climate, humidity, elevation)
        np.testing.assert_array_equal(result, [BiomeType.POLAR, BiomeType.SEA])

    def test_flags_are_distinct_bits(self):
        values = [int(b) for b in BiomeType if b != BiomeType.NONE]
        assert len(set(values)) == len(values)
        assert all(v & (v - 1) == 0 for v in values)


class TestEcologyType:
    def test_sea_level_is_sea(self):
        assert get_ecology_type(ClimateType.BOREAL, HumidityType.HUMID, 0.0) == EcologyType.SEA

    @pytest.mark.parametrize(
        "climate,humidity,expected",
        [
            (ClimateType.POLAR, HumidityType.PERARID, EcologyType.DESERT),
            (ClimateType.POLAR, HumidityType.ARID, EcologyType.ICE),
            (ClimateType.SUBPOLAR, HumidityType.NONE, EcologyType.DRY_TUNDRA),
            (ClimateType.SUBPOLAR, HumidityType.PERARID, EcologyType.MOIST_TUNDRA),
            (ClimateType.SUBPOLAR, HumidityType.ARID, EcologyType.WET_TUNDRA),
            (ClimateType.SUBPOLAR, HumidityType.HUMID, EcologyType.RAIN_TUNDRA),
            (ClimateType.BOREAL, HumidityType.PERARID, EcologyType.DRY_SCRUB),
            (ClimateType.BOREAL, HumidityType.SEMIARID, EcologyType.WET_FOREST),
            (ClimateType.COOL_TEMPERATE, HumidityType.PERARID, EcologyType.DESERT_SCRUB),
            (ClimateType.COOL_TEMPERATE, HumidityType.ARID, EcologyType.STEPPE),
            (ClimateType.COOL_TEMPERATE, HumidityType.HUMID, EcologyType.RAIN_FOREST),
            (ClimateType.WARM_TEMPERATE, HumidityType.ARID, EcologyType.THORN_SCRUB),
            (ClimateType.WARM_TEMPERATE, HumidityType.HUMID, EcologyType.WET_FOREST),
            (ClimateType.SUBTROPICAL, HumidityType.ARID, EcologyType.THORN_WOODLAND),
            (ClimateType.SUBTROPICAL, HumidityType.SEMIARID, EcologyType.DRY_FOREST),
            (ClimateType.TROPICAL, HumidityType.SEMIARID, EcologyType.VERY_DRY_FOREST),
            (ClimateType.TROPICAL, HumidityType.PERHUMID, EcologyType.WET_FOREST),
            (ClimateType.TROPICAL, HumidityType.SUPERHUMID, EcologyType.RAIN_FOREST),
            (ClimateType.SUPERTROPICAL, HumidityType.HUMID, EcologyType.DESERT),
        ],
    )
    def test_land_rules(self, climate, humidity, expected):
        assert get_ecology_type(climate, humidity, 0.5) == expected

    def test_scalar_returns_enum(self):
        result = get_ecology_type(ClimateType.TROPICAL, HumidityType.HUMID, 1.0)
        assert isinstance(result, EcologyType)
