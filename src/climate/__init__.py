"""
Climate classification and seasonal interpolation package.

Core functionality:
- Climate, humidity, biome and ecology types with their classification rules
- Seasonal precipitation and snowfall aggregation
- Sea ice and snow cover freeze intervals
- Point-in-time interpolation between seasons
"""

from .types import (
    BiomeType,
    ClimateType,
    EcologyType,
    HumidityType,
    get_biome_type,
    get_climate_type,
    get_ecology_type,
    get_humidity_type,
)
from .precipitation import SeasonalGrid, SeasonalPrecipitation
from .freeze import get_freeze_interval, freeze_intervals
from .classifier import ClassificationGrids, ClimateClassification, classify_climate
from .interpolation import SeasonalInterpolator, annual_range_value, is_frozen_at

__all__ = [
    "BiomeType",
    "ClimateType",
    "EcologyType",
    "HumidityType",
    "get_biome_type",
    "get_climate_type",
    "get_ecology_type",
    "get_humidity_type",
    "SeasonalGrid",
    "SeasonalPrecipitation",
    "get_freeze_interval",
    "freeze_intervals",
    "ClassificationGrids",
    "ClimateClassification",
    "classify_climate",
    "SeasonalInterpolator",
    "annual_range_value",
    "is_frozen_at",
]
