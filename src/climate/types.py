"""
Categorical climate types and the rules that assign them.

Every classifier accepts either scalars or numpy arrays. Scalar input returns
an enum member; array input returns an int32 array of enum values, so whole
grids are classified with a single table lookup.
"""

from enum import IntEnum, IntFlag
from typing import Union

import numpy as np

from src.config import WATER_MELTING_POINT

ArrayOrScalar = Union[int, float, np.ndarray]


class ClimateType(IntEnum):
    """Temperature-based climate zones, coldest first."""

    NONE = 0
    POLAR = 1
    SUBPOLAR = 2
    BOREAL = 3
    COOL_TEMPERATE = 4
    WARM_TEMPERATE = 5
    SUBTROPICAL = 6
    TROPICAL = 7
    SUPERTROPICAL = 8


class HumidityType(IntEnum):
    """Annual precipitation bands, driest first."""

    NONE = 0
    SUPERARID = 1
    PERARID = 2
    ARID = 3
    SEMIARID = 4
    SUBHUMID = 5
    HUMID = 6
    PERHUMID = 7
    SUPERHUMID = 8


class BiomeType(IntFlag):
    """Broad vegetation biomes. Values are bit flags so sets can be combined."""

    NONE = 0
    POLAR = 1 << 0
    TUNDRA = 1 << 1
    LICHEN_WOODLAND = 1 << 2
    CONIFEROUS_FOREST = 1 << 3
    MIXED_FOREST = 1 << 4
    STEPPE = 1 << 5
    COLD_DESERT = 1 << 6
    DECIDUOUS_FOREST = 1 << 7
    SHRUBLAND = 1 << 8
    HOT_DESERT = 1 << 9
    SAVANNA = 1 << 10
    MONSOON_FOREST = 1 << 11
    RAIN_FOREST = 1 << 12
    SEA = 1 << 13


class EcologyType(IntEnum):
    """Life zones combining temperature and humidity."""

    NONE = 0
    DESERT = 1
    ICE = 2
    DRY_TUNDRA = 3
    MOIST_TUNDRA = 4
    WET_TUNDRA = 5
    RAIN_TUNDRA = 6
    DESERT_SCRUB = 7
    DRY_SCRUB = 8
    STEPPE = 9
    THORN_SCRUB = 10
    THORN_WOODLAND = 11
    VERY_DRY_FOREST = 12
    DRY_FOREST = 13
    MOIST_FOREST = 14
    WET_FOREST = 15
    RAIN_FOREST = 16
    SEA = 17


# Upper bounds (inclusive) above the melting point of water, in K
CLIMATE_THRESHOLDS = np.array([1.5, 3.0, 6.0, 12.0, 18.0, 24.0, 68.0])

# Lower bounds (inclusive) of each humidity band above Superarid, in mm/year
HUMIDITY_THRESHOLDS = np.array([125.0, 250.0, 500.0, 1000.0, 2000.0, 4000.0, 8000.0])


def get_climate_type(temperature: ArrayOrScalar) -> Union[ClimateType, np.ndarray]:
    """
    Climate zone for an average temperature.

    Args:
        temperature: Average temperature in K, scalar or array

    Returns:
        ClimateType for scalar input, int32 array otherwise

    Examples:
        >>> get_climate_type(280.0)
        <ClimateType.COOL_TEMPERATE: 4>
    """
    temperature = np.asarray(temperature, dtype=np.float64)
    index = np.searchsorted(
        CLIMATE_THRESHOLDS + WATER_MELTING_POINT, temperature, side="left"
    )
    result = (index + ClimateType.POLAR).astype(np.int32)
    if result.ndim == 0:
        return ClimateType(int(result))
    return result


def get_humidity_type(
    annual_precipitation: ArrayOrScalar,
) -> Union[HumidityType, np.ndarray]:
    """
    Humidity band for an annual precipitation total.

    Args:
        annual_precipitation: Precipitation in mm/year, scalar or array

    Returns:
        HumidityType for scalar input, int32 array otherwise
    """
    annual_precipitation = np.asarray(annual_precipitation, dtype=np.float64)
    index = np.searchsorted(HUMIDITY_THRESHOLDS, annual_precipitation, side="right")
    result = (index + HumidityType.SUPERARID).astype(np.int32)
    if result.ndim == 0:
        return HumidityType(int(result))
    return result


def _biome_rule(climate: ClimateType, humidity: HumidityType) -> BiomeType:
    if climate == ClimateType.POLAR:
        return BiomeType.POLAR
    if climate == ClimateType.SUBPOLAR:
        return BiomeType.TUNDRA
    if climate == ClimateType.BOREAL:
        if humidity <= HumidityType.PERARID:
            return BiomeType.LICHEN_WOODLAND
        return BiomeType.CONIFEROUS_FOREST
    if climate == ClimateType.COOL_TEMPERATE:
        if humidity <= HumidityType.PERARID:
            return BiomeType.COLD_DESERT
        if humidity == HumidityType.ARID:
            return BiomeType.STEPPE
        return BiomeType.MIXED_FOREST
    if climate == ClimateType.WARM_TEMPERATE:
        if humidity <= HumidityType.PERARID:
            return BiomeType.HOT_DESERT
        if humidity <= HumidityType.SEMIARID:
            return BiomeType.SHRUBLAND
        return BiomeType.DECIDUOUS_FOREST
    if climate == ClimateType.SUBTROPICAL:
        if humidity <= HumidityType.PERARID:
            return BiomeType.HOT_DESERT
        if humidity == HumidityType.ARID:
            return BiomeType.SAVANNA
        if humidity <= HumidityType.SUBHUMID:
            return BiomeType.MONSOON_FOREST
        return BiomeType.RAIN_FOREST
    if climate == ClimateType.TROPICAL:
        if humidity <= HumidityType.PERARID:
            return BiomeType.HOT_DESERT
        if humidity <= HumidityType.SEMIARID:
            return BiomeType.SAVANNA
        if humidity == HumidityType.SUBHUMID:
            return BiomeType.MONSOON_FOREST
        return BiomeType.RAIN_FOREST
    return BiomeType.HOT_DESERT


def _ecology_rule(climate: ClimateType, humidity: HumidityType) -> EcologyType:
    # Unclassified humidity behaves as the driest band
    humidity = max(humidity, HumidityType.SUPERARID)

    if climate == ClimateType.POLAR:
        if humidity <= HumidityType.PERARID:
            return EcologyType.DESERT
        return EcologyType.ICE
    if climate == ClimateType.SUBPOLAR:
        return {
            HumidityType.SUPERARID: EcologyType.DRY_TUNDRA,
            HumidityType.PERARID: EcologyType.MOIST_TUNDRA,
            HumidityType.ARID: EcologyType.WET_TUNDRA,
        }.get(humidity, EcologyType.RAIN_TUNDRA)
    if climate == ClimateType.BOREAL:
        return {
            HumidityType.SUPERARID: EcologyType.DESERT,
            HumidityType.PERARID: EcologyType.DRY_SCRUB,
            HumidityType.ARID: EcologyType.MOIST_FOREST,
            HumidityType.SEMIARID: EcologyType.WET_FOREST,
        }.get(humidity, EcologyType.RAIN_FOREST)
    if climate == ClimateType.COOL_TEMPERATE:
        return {
            HumidityType.SUPERARID: EcologyType.DESERT,
            HumidityType.PERARID: EcologyType.DESERT_SCRUB,
            HumidityType.ARID: EcologyType.STEPPE,
            HumidityType.SEMIARID: EcologyType.MOIST_FOREST,
            HumidityType.SUBHUMID: EcologyType.WET_FOREST,
        }.get(humidity, EcologyType.RAIN_FOREST)
    if climate in (ClimateType.WARM_TEMPERATE, ClimateType.SUBTROPICAL):
        arid = (
            EcologyType.THORN_SCRUB
            if climate == ClimateType.WARM_TEMPERATE
            else EcologyType.THORN_WOODLAND
        )
        return {
            HumidityType.SUPERARID: EcologyType.DESERT,
            HumidityType.PERARID: EcologyType.DESERT_SCRUB,
            HumidityType.ARID: arid,
            HumidityType.SEMIARID: EcologyType.DRY_FOREST,
            HumidityType.SUBHUMID: EcologyType.MOIST_FOREST,
            HumidityType.HUMID: EcologyType.WET_FOREST,
        }.get(humidity, EcologyType.RAIN_FOREST)
    if climate == ClimateType.TROPICAL:
        return {
            HumidityType.SUPERARID: EcologyType.DESERT,
            HumidityType.PERARID: EcologyType.DESERT_SCRUB,
            HumidityType.ARID: EcologyType.THORN_WOODLAND,
            HumidityType.SEMIARID: EcologyType.VERY_DRY_FOREST,
            HumidityType.SUBHUMID: EcologyType.DRY_FOREST,
            HumidityType.HUMID: EcologyType.MOIST_FOREST,
            HumidityType.PERHUMID: EcologyType.WET_FOREST,
        }.get(humidity, EcologyType.RAIN_FOREST)
    return EcologyType.DESERT


def _build_table(rule) -> np.ndarray:
    table = np.zeros((len(ClimateType), len(HumidityType)), dtype=np.int32)
    for climate in ClimateType:
        for humidity in HumidityType:
            table[climate, humidity] = int(rule(climate, humidity))
    return table


# Lookup tables indexed [climate, humidity]
BIOME_TABLE = _build_table(_biome_rule)
ECOLOGY_TABLE = _build_table(_ecology_rule)


def _classify(table, climate, humidity, elevation, sea_value, enum_type):
    climate = np.asarray(climate, dtype=np.int64)
    humidity = np.asarray(humidity, dtype=np.int64)
    elevation = np.asarray(elevation, dtype=np.float64)

    result = np.where(
        elevation <= 0, int(sea_value), table[climate, humidity]
    ).astype(np.int32)

    # Return scalar if input was scalar
    if result.ndim == 0:
        return enum_type(int(result))
    return result


def get_biome_type(
    climate: ArrayOrScalar, humidity: ArrayOrScalar, elevation: ArrayOrScalar
) -> Union[BiomeType, np.ndarray]:
    """
    Biome for a climate zone, humidity band and elevation.

    Cells at or below sea level (elevation <= 0) are Sea.

    Args:
        climate: ClimateType value(s)
        humidity: HumidityType value(s)
        elevation: Elevation, any units with sea level at 0

    Returns:
        BiomeType for scalar input, int32 array otherwise
    """
    return _classify(BIOME_TABLE, climate, humidity, elevation, BiomeType.SEA, BiomeType)


def get_ecology_type(
    climate: ArrayOrScalar, humidity: ArrayOrScalar, elevation: ArrayOrScalar
) -> Union[EcologyType, np.ndarray]:
    """Life zone for a climate zone, humidity band and elevation. See get_biome_type."""
    return _classify(
        ECOLOGY_TABLE, climate, humidity, elevation, EcologyType.SEA, EcologyType
    )
