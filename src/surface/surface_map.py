"""
Complete surface snapshot: elevation, climate, seasons and hydrology.

A SurfaceMapSet is validated as a whole at construction. Every grid must
match the elevation grid's shape, otherwise construction fails with
DimensionMismatch naming the offending grid and nothing is built.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from src.climate.classifier import ClimateClassification, classify_climate
from src.climate.interpolation import SeasonalInterpolator
from src.climate.precipitation import SeasonalPrecipitation
from src.config import DEFAULT_PLANET_RADIUS, SNOW_TO_RAIN_RATIO
from src.surface import codec
from src.surface.errors import DimensionMismatch
from src.surface.hill_shading import HillShadingOptions
from src.surface.hydrology import HydrologyMaps, compute_hydrology
from src.surface.projection import MapProjectionOptions
from src.surface.ranges import FreezeIntervalGrid, RangeGrid, readonly_array

logger = logging.getLogger(__name__)


class SurfaceMapSet:
    """
    Read-only aggregate of every map describing one planetary surface.

    Args:
        elevation: Signed elevation grid (X, Y) normalized to [-1, 1]
        classification: Climate classification for the same grid
        precipitation: Seasonal precipitation and snowfall
        temperature_ranges: Per-cell annual temperature range in K
        hydrology: Lake depth and flow (default: no water)
        max_elevation: Physical elevation of a normalized 1, in metres
        max_precipitation: Physical precipitation of a normalized 1, mm/year
        snow_to_rain_ratio: Snowfall depth per unit of liquid precipitation
        average_elevation: Normalized average elevation (default: grid mean)

    Raises:
        DimensionMismatch: If any grid's shape differs from elevation's
    """

    def __init__(
        self,
        elevation: np.ndarray,
        classification: ClimateClassification,
        precipitation: SeasonalPrecipitation,
        temperature_ranges: RangeGrid,
        hydrology: Optional[HydrologyMaps] = None,
        max_elevation: float = 1.0,
        max_precipitation: float = 1.0,
        snow_to_rain_ratio: float = SNOW_TO_RAIN_RATIO,
        average_elevation: Optional[float] = None,
    ):
        elevation = np.asarray(elevation, dtype=np.float64)
        if elevation.ndim != 2:
            raise ValueError(f"Elevation must be a 2D grid, got shape {elevation.shape}")
        if hydrology is None:
            hydrology = HydrologyMaps.empty(elevation.shape)

        grids = {
            "climate": classification.grids.climate,
            "humidity": classification.grids.humidity,
            "biome": classification.grids.biome,
            "ecology": classification.grids.ecology,
            "sea ice": classification.sea_ice.start,
            "snow cover": classification.snow_cover.start,
            "temperature": temperature_ranges.minimum,
            "depth": hydrology.depth,
            "flow": hydrology.flow,
        }
        for name, grid in grids.items():
            if grid.shape != elevation.shape:
                logger.error(
                    f"Cannot build surface map: {name} grid {grid.shape} "
                    f"does not match elevation {elevation.shape}"
                )
                raise DimensionMismatch(name, elevation.shape, grid.shape)
        if precipitation.shape != elevation.shape:
            raise DimensionMismatch("precipitation", elevation.shape, precipitation.shape)

        self.elevation = readonly_array(elevation)
        self.classification = classification
        self.precipitation = precipitation
        self.temperature_ranges = temperature_ranges
        self.hydrology = hydrology
        self.max_elevation = float(max_elevation)
        self.max_precipitation = float(max_precipitation)
        self.snow_to_rain_ratio = float(snow_to_rain_ratio)
        if average_elevation is None:
            average_elevation = float(np.mean(elevation))
        self.average_elevation = float(average_elevation)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.elevation.shape

    @property
    def climate(self) -> np.ndarray:
        return self.classification.grids.climate

    @property
    def humidity(self) -> np.ndarray:
        return self.classification.grids.humidity

    @property
    def biome(self) -> np.ndarray:
        return self.classification.grids.biome

    @property
    def ecology(self) -> np.ndarray:
        return self.classification.grids.ecology

    @property
    def sea_ice(self) -> FreezeIntervalGrid:
        return self.classification.sea_ice

    @property
    def snow_cover(self) -> FreezeIntervalGrid:
        return self.classification.snow_cover

    @property
    def seasons(self):
        return self.precipitation.seasons

    def water_surface_elevation(self) -> np.ndarray:
        """Elevation of the ground plus any standing water."""
        return self.elevation + self.hydrology.depth

    def interpolator(self) -> SeasonalInterpolator:
        return SeasonalInterpolator(self.precipitation, self.temperature_ranges)

    def to_image(
        self,
        layer: str,
        hill_shading: Optional[HillShadingOptions] = None,
        proportion_of_year: Optional[float] = None,
    ) -> Image.Image:
        """
        Render one layer of the surface.

        Args:
            layer: One of "elevation", "biome", "precipitation", "temperature"
                or "water"
            hill_shading: Optional hill shading against the elevation grid
            proportion_of_year: For precipitation and temperature, render the
                value at this time instead of the annual figure

        Returns:
            PIL RGB image, X pixels wide and Y pixels high
        """
        if layer == "elevation":
            return codec.elevation_map_to_image(self.elevation, hill_shading)
        if layer == "water":
            return codec.elevation_map_to_image(self.water_surface_elevation(), hill_shading)
        if layer == "biome":
            return codec.biome_map_to_image(self.biome, self.elevation, hill_shading)
        if layer == "precipitation":
            if proportion_of_year is None:
                values = self.classification.total_precipitation
            else:
                values = self.interpolator().precipitation_at(proportion_of_year)
            return codec.precipitation_map_to_image(values, self.elevation, hill_shading)
        if layer == "temperature":
            if proportion_of_year is None:
                values = self.temperature_ranges.average
            else:
                values = self.interpolator().temperature_at(proportion_of_year)
            return codec.temperature_map_to_image(values, self.elevation, hill_shading)
        raise ValueError(f"Unknown layer '{layer}'")

    def __repr__(self) -> str:
        return (
            f"SurfaceMapSet(shape={self.shape}, seasons={self.precipitation.count}, "
            f"climate={self.classification.climate.name})"
        )


def build_surface_map_set(
    elevation: np.ndarray,
    temperature_ranges: RangeGrid,
    precipitation: SeasonalPrecipitation,
    max_precipitation: float,
    options: Optional[MapProjectionOptions] = None,
    max_elevation: float = 1.0,
    radius: float = DEFAULT_PLANET_RADIUS,
    hydrology: Optional[HydrologyMaps] = None,
    snow_to_rain_ratio: float = SNOW_TO_RAIN_RATIO,
    **classify_kwargs,
) -> SurfaceMapSet:
    """
    Classify a surface, derive its hydrology and assemble a SurfaceMapSet.

    Args:
        elevation: Signed elevation grid (X, Y)
        temperature_ranges: Per-cell annual temperature range in K
        precipitation: Seasonal precipitation and snowfall
        max_precipitation: Planet's maximum precipitation in mm/year
        options: Projection options for latitude and cell area
        max_elevation: Physical elevation of a normalized 1, in metres
        radius: Planet radius in metres, used for runoff volumes
        hydrology: Precomputed hydrology (default: derived from elevation)
        snow_to_rain_ratio: Snowfall depth per unit of liquid precipitation
        **classify_kwargs: Passed to classify_climate

    Returns:
        SurfaceMapSet
    """
    elevation = np.asarray(elevation, dtype=np.float64)
    classification = classify_climate(
        elevation,
        temperature_ranges,
        precipitation,
        max_precipitation,
        options=options,
        max_elevation=max_elevation,
        snow_to_rain_ratio=snow_to_rain_ratio,
        **classify_kwargs,
    )
    if hydrology is None:
        hydrology = compute_hydrology(
            elevation,
            classification.total_precipitation,
            max_precipitation,
            radius=radius,
            options=options,
        )
    return SurfaceMapSet(
        elevation,
        classification,
        precipitation,
        temperature_ranges,
        hydrology=hydrology,
        max_elevation=max_elevation,
        max_precipitation=max_precipitation,
        snow_to_rain_ratio=snow_to_rain_ratio,
        average_elevation=classify_kwargs.get("average_elevation"),
    )
