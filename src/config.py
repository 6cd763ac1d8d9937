"""Configuration module for the surface climate mapping project.

Centralizes data paths, physical constants and default settings.
"""
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = DATA_DIR / "output"

# Cache directories (created as needed)
CACHE_DIR = DATA_DIR / "cache"
SURFACE_CACHE = CACHE_DIR / "surface"

# Ensure cache directories exist
for cache_dir in [SURFACE_CACHE]:
    cache_dir.mkdir(parents=True, exist_ok=True)

# Physical constants
WATER_MELTING_POINT = 273.15  # K
SEAWATER_MELTING_POINT = 271.35  # K, typical 35 PSU ocean water
SNOW_TO_RAIN_RATIO = 13.0
SECONDS_PER_YEAR = 31557600.0  # Julian year

# Projection limits
MAX_INT32 = 2**31 - 1
MAX_RESOLUTION = MAX_INT32 // 2

# Default settings
DEFAULT_IMAGE_FORMAT = "PNG"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PLANET_RADIUS = 6371000.0  # m
