"""
Seasonal precipitation and snowfall grids.

Each season holds a normalized precipitation grid and a normalized snowfall
grid, both in [0, 1]. Physical values are recovered by multiplying by the
planet's maximum precipitation (mm/year) and maximum snowfall
(maximum precipitation times the snow-to-rain ratio).

Seasons are expected to be non-overlapping and to cover the year exactly
once, so that summing them gives annual totals. This is not validated.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from src.config import SNOW_TO_RAIN_RATIO
from src.surface.errors import DimensionMismatch, check_shape
from src.surface.ranges import FloatRange, readonly_array

logger = logging.getLogger(__name__)


class SeasonalGrid:
    """
    Precipitation and snowfall for one season.

    Attributes:
        precipitation: Normalized precipitation grid (X, Y)
        snowfall: Normalized snowfall grid (X, Y)
        precipitation_range: Area-wide range of precipitation
        snowfall_range: Area-wide range of snowfall
    """

    def __init__(self, precipitation: np.ndarray, snowfall: np.ndarray):
        precipitation = np.asarray(precipitation, dtype=np.float64)
        snowfall = np.asarray(snowfall, dtype=np.float64)
        if precipitation.ndim != 2:
            raise ValueError(
                f"Precipitation must be a 2D grid, got shape {precipitation.shape}"
            )
        check_shape("snowfall", snowfall, precipitation.shape)

        self.precipitation = readonly_array(precipitation)
        self.snowfall = readonly_array(snowfall)
        self.precipitation_range = FloatRange.of(self.precipitation)
        self.snowfall_range = FloatRange.of(self.snowfall)

    @classmethod
    def from_samples(
        cls,
        precipitation: np.ndarray,
        snowfall: np.ndarray,
        max_precipitation: float,
        snow_to_rain_ratio: float = SNOW_TO_RAIN_RATIO,
    ) -> "SeasonalGrid":
        """
        Build from physical samples by normalizing into [0, 1].

        Args:
            precipitation: Precipitation in mm/year
            snowfall: Snowfall in mm/year
            max_precipitation: Planet's maximum precipitation in mm/year
            snow_to_rain_ratio: Snowfall depth per unit of liquid precipitation

        Returns:
            SeasonalGrid with values clipped to [0, 1]
        """
        if max_precipitation <= 0:
            raise ValueError(
                f"max_precipitation must be positive, got {max_precipitation}"
            )
        max_snowfall = max_precipitation * snow_to_rain_ratio
        return cls(
            np.clip(np.asarray(precipitation, dtype=np.float64) / max_precipitation, 0, 1),
            np.clip(np.asarray(snowfall, dtype=np.float64) / max_snowfall, 0, 1),
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.precipitation.shape

    def __repr__(self) -> str:
        return (
            f"SeasonalGrid(shape={self.shape}, "
            f"precipitation_range={self.precipitation_range.as_tuple()})"
        )


class SeasonalPrecipitation:
    """
    Ordered list of seasons sharing one grid shape.

    Raises:
        ValueError: If no seasons are given
        DimensionMismatch: If seasons differ in shape
    """

    def __init__(self, seasons: Sequence[SeasonalGrid]):
        seasons = list(seasons)
        if not seasons:
            raise ValueError("At least one season is required")

        expected = seasons[0].shape
        for i, season in enumerate(seasons[1:], start=1):
            if season.shape != expected:
                logger.error(
                    f"Season {i} has shape {season.shape}, expected {expected}"
                )
                raise DimensionMismatch(f"season {i}", expected, season.shape)

        self._seasons = tuple(seasons)
        logger.debug(f"Aggregating {len(seasons)} seasons of shape {expected}")

    @property
    def seasons(self) -> Tuple[SeasonalGrid, ...]:
        return self._seasons

    @property
    def count(self) -> int:
        return len(self._seasons)

    def __len__(self) -> int:
        return len(self._seasons)

    def __getitem__(self, index: int) -> SeasonalGrid:
        return self._seasons[index]

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._seasons[0].shape

    @property
    def precipitation_ranges(self) -> List[FloatRange]:
        return [s.precipitation_range for s in self._seasons]

    @property
    def snowfall_ranges(self) -> List[FloatRange]:
        return [s.snowfall_range for s in self._seasons]

    def total_precipitation(self) -> np.ndarray:
        """Per-cell sum of normalized precipitation over all seasons."""
        return np.sum([s.precipitation for s in self._seasons], axis=0)

    def total_snowfall(self) -> np.ndarray:
        """Per-cell sum of normalized snowfall over all seasons."""
        return np.sum([s.snowfall for s in self._seasons], axis=0)

    def total_precipitation_range(self, max_precipitation: float) -> FloatRange:
        """
        Area-wide annual precipitation range in physical units.

        Scans the per-cell annual totals multiplied by max_precipitation.
        """
        return FloatRange.of(self.total_precipitation() * max_precipitation)

    def total_snowfall_range(
        self, max_precipitation: float, snow_to_rain_ratio: float = SNOW_TO_RAIN_RATIO
    ) -> FloatRange:
        """Area-wide annual snowfall range, scaled by the maximum snowfall."""
        return FloatRange.of(
            self.total_snowfall() * max_precipitation * snow_to_rain_ratio
        )

