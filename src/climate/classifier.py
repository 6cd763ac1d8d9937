"""
Per-cell and area-wide climate classification.

Combines an elevation grid, per-cell annual temperature ranges and seasonal
precipitation into climate, humidity, biome and ecology grids, along with
sea ice and snow cover freeze intervals. The four classification grids are
always computed together so they stay consistent with each other.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from src.climate.freeze import sea_ice_grid, snow_cover_grid
from src.climate.precipitation import SeasonalPrecipitation
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
from src.config import SEAWATER_MELTING_POINT, SNOW_TO_RAIN_RATIO, WATER_MELTING_POINT
from src.surface.errors import DimensionMismatch, check_shape
from src.surface.projection import MapProjectionOptions, get_lat_lon
from src.surface.ranges import FloatRange, FreezeIntervalGrid, RangeGrid, readonly_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationGrids:
    """Categorical grids derived from one climate snapshot."""

    climate: np.ndarray
    """ClimateType values per cell."""

    humidity: np.ndarray
    """HumidityType values per cell."""

    biome: np.ndarray
    """BiomeType values per cell."""

    ecology: np.ndarray
    """EcologyType values per cell."""


@dataclass(frozen=True)
class ClimateClassification:
    """
    Output of classify_climate.

    Grids are X-major with the same shape as the elevation input. Totals are
    normalized sums across seasons; ranges are in physical units.
    """

    grids: ClassificationGrids
    total_precipitation: np.ndarray
    total_snowfall: np.ndarray
    sea_ice: FreezeIntervalGrid
    snow_cover: FreezeIntervalGrid

    temperature_range: FloatRange
    """Area-wide temperature range in K."""

    precipitation_range: FloatRange
    """Area-wide annual precipitation range in mm/year."""

    snowfall_range: FloatRange
    """Area-wide annual snowfall range in mm/year."""

    climate: ClimateType
    humidity: HumidityType
    biome: BiomeType
    ecology: EcologyType

    @property
    def shape(self):
        return self.grids.climate.shape


def latitude_grid(shape, options: Optional[MapProjectionOptions] = None) -> np.ndarray:
    """
    Latitude in radians of every cell in a grid of the given (X, Y) shape.

    Latitude depends only on the row, so the number of columns is free.
    """
    width, height = shape
    latitude, _ = get_lat_lon(0, np.arange(height), height, options)
    return np.broadcast_to(np.asarray(latitude), (width, height)).copy()


def classify_climate(
    elevation: np.ndarray,
    temperature_ranges: RangeGrid,
    precipitation: SeasonalPrecipitation,
    max_precipitation: float,
    options: Optional[MapProjectionOptions] = None,
    max_elevation: float = 1.0,
    average_elevation: Optional[float] = None,
    snow_to_rain_ratio: float = SNOW_TO_RAIN_RATIO,
    sea_freeze_point: float = SEAWATER_MELTING_POINT,
    snow_freeze_point: float = WATER_MELTING_POINT,
    latitude: Optional[np.ndarray] = None,
) -> ClimateClassification:
    """
    Classify every cell of a surface and the surface as a whole.

    Args:
        elevation: Normalized elevation grid (X, Y) in [-1, 1], sea level at 0
        temperature_ranges: Per-cell annual temperature range in K
        precipitation: Seasonal precipitation and snowfall grids
        max_precipitation: Planet's maximum precipitation in mm/year
        options: Projection used to derive latitude when not given
        max_elevation: Physical elevation of a normalized value of 1
        average_elevation: Normalized average elevation (default: grid mean)
        snow_to_rain_ratio: Snowfall depth per unit of liquid precipitation
        sea_freeze_point: Freezing temperature of sea water in K
        snow_freeze_point: Freezing temperature of fresh water in K
        latitude: Optional latitude grid in radians, overriding options

    Returns:
        ClimateClassification

    Raises:
        DimensionMismatch: If any input grid differs in shape from elevation
    """
    elevation = np.asarray(elevation, dtype=np.float64)
    shape = elevation.shape
    if elevation.ndim != 2:
        raise ValueError(f"Elevation must be a 2D grid, got shape {shape}")

    try:
        check_shape("temperature", temperature_ranges.minimum, shape)
        if precipitation.shape != shape:
            raise DimensionMismatch("precipitation", shape, precipitation.shape)
        if latitude is None:
            latitude = latitude_grid(shape, options)
        else:
            latitude = np.asarray(latitude, dtype=np.float64)
            check_shape("latitude", latitude, shape)
    except DimensionMismatch as e:
        logger.error(f"Cannot classify climate: {e}")
        raise

    logger.info(f"Classifying climate for {shape[0]}x{shape[1]} grid")

    total_precipitation = precipitation.total_precipitation()
    total_snowfall = precipitation.total_snowfall()

    climate = get_climate_type(temperature_ranges.average)
    humidity = get_humidity_type(total_precipitation * max_precipitation)
    biome = get_biome_type(climate, humidity, elevation)
    ecology = get_ecology_type(climate, humidity, elevation)

    grids = ClassificationGrids(
        climate=readonly_array(climate, dtype=np.int32),
        humidity=readonly_array(humidity, dtype=np.int32),
        biome=readonly_array(biome, dtype=np.int32),
        ecology=readonly_array(ecology, dtype=np.int32),
    )

    sea_ice = sea_ice_grid(
        elevation,
        temperature_ranges.minimum,
        temperature_ranges.maximum,
        latitude,
        sea_freeze_point,
    )
    snow_cover = snow_cover_grid(
        elevation,
        humidity,
        temperature_ranges.minimum,
        temperature_ranges.maximum,
        latitude,
        snow_freeze_point,
    )

    temperature_range = temperature_ranges.summary()
    precipitation_range = precipitation.total_precipitation_range(max_precipitation)
    snowfall_range = precipitation.total_snowfall_range(
        max_precipitation, snow_to_rain_ratio
    )

    if average_elevation is None:
        average_elevation = float(np.mean(elevation))
    area_elevation = average_elevation * max_elevation

    area_climate = get_climate_type(temperature_range.average)
    area_humidity = get_humidity_type(precipitation_range.average)

    logger.info(
        f"Area climate: {area_climate.name}, humidity: {area_humidity.name}, "
        f"temperature {temperature_range.minimum:.1f}-{temperature_range.maximum:.1f} K"
    )

    return ClimateClassification(
        grids=grids,
        total_precipitation=readonly_array(total_precipitation),
        total_snowfall=readonly_array(total_snowfall),
        sea_ice=sea_ice,
        snow_cover=snow_cover,
        temperature_range=temperature_range,
        precipitation_range=precipitation_range,
        snowfall_range=snowfall_range,
        climate=area_climate,
        humidity=area_humidity,
        biome=get_biome_type(area_climate, area_humidity, area_elevation),
        ecology=get_ecology_type(area_climate, area_humidity, area_elevation),
    )
