"""
Point-in-time queries over seasonal data.

Time is a proportion of the year in [0, 1), with 0 at the start of the first
season. Precipitation and snowfall are linearly interpolated between the two
seasons bracketing t. Temperature follows a triangular annual cycle: minimum
at t = 0, maximum at t = 0.5.
"""

import logging
import math
from typing import Optional, Tuple, Union

import numpy as np

from src.climate.precipitation import SeasonalPrecipitation
from src.surface.errors import DimensionMismatch
from src.surface.ranges import FloatRange, FreezeInterval, FreezeIntervalGrid, RangeGrid
from src.utils.helpers import lerp

logger = logging.getLogger(__name__)


def wrap_time(proportion_of_year: float) -> float:
    """Wrap t into [0, 1) so that t = 1 is the same moment as t = 0."""
    t = proportion_of_year % 1.0
    # Float modulo can return exactly 1.0 for tiny negative inputs
    return 0.0 if t >= 1.0 else t


def season_weights(proportion_of_year: float, season_count: int) -> Tuple[int, int, float]:
    """
    Seasons bracketing t and the interpolation weight between them.

    Args:
        proportion_of_year: Time t
        season_count: Number of seasons N

    Returns:
        Tuple of (index, next_index, weight) where index = floor(t * N),
        next_index = (index + 1) mod N and weight = (t - index / N) * N

    Examples:
        >>> season_weights(0.375, 4)
        (1, 2, 0.5)
    """
    if season_count < 1:
        raise ValueError(f"season_count must be at least 1, got {season_count}")
    t = wrap_time(proportion_of_year)
    index = min(int(math.floor(t * season_count)), season_count - 1)
    next_index = (index + 1) % season_count
    weight = (t - index / season_count) * season_count
    return index, next_index, weight


def summer_proportion(proportion_of_year: float) -> float:
    """Position within the annual temperature cycle: 0 at t = 0, 1 at t = 0.5."""
    t = wrap_time(proportion_of_year)
    return 1.0 - abs(0.5 - t) / 0.5


def annual_range_value(value_range: FloatRange, proportion_of_year: float) -> float:
    """Value of a range at time t, moving linearly from minimum to maximum."""
    return lerp(value_range.minimum, value_range.maximum, proportion_of_year)


def is_frozen_at(
    intervals: Union[FreezeInterval, FreezeIntervalGrid], proportion_of_year: float
) -> Union[bool, np.ndarray]:
    """Whether the freeze condition holds at time t, for one interval or a grid."""
    t = wrap_time(proportion_of_year)
    if isinstance(intervals, FreezeIntervalGrid):
        return intervals.active_at(t)
    return intervals.contains(t)


class SeasonalInterpolator:
    """
    Interpolates seasonal grids and temperature ranges to any time of year.

    Args:
        precipitation: Seasonal precipitation and snowfall
        temperature_ranges: Per-cell annual temperature range in K

    Raises:
        DimensionMismatch: If the temperature grid differs from the seasons
    """

    def __init__(
        self,
        precipitation: SeasonalPrecipitation,
        temperature_ranges: Optional[RangeGrid] = None,
    ):
        if temperature_ranges is not None and temperature_ranges.shape != precipitation.shape:
            raise DimensionMismatch(
                "temperature", precipitation.shape, temperature_ranges.shape
            )
        self.precipitation = precipitation
        self.temperature_ranges = temperature_ranges

    def _interpolate(self, attribute: str, t: float, x: Optional[int], y: Optional[int]):
        index, next_index, weight = season_weights(t, self.precipitation.count)
        a = getattr(self.precipitation[index], attribute)
        b = getattr(self.precipitation[next_index], attribute)
        if x is not None and y is not None:
            return float(lerp(a[x, y], b[x, y], weight))
        return lerp(a, b, weight)

    def precipitation_at(
        self, proportion_of_year: float, x: Optional[int] = None, y: Optional[int] = None
    ) -> Union[float, np.ndarray]:
        """
        Normalized precipitation at time t.

        Args:
            proportion_of_year: Time t in [0, 1]
            x: Column index, or None for the whole grid
            y: Row index, or None for the whole grid

        Returns:
            Scalar for a single cell, otherwise an (X, Y) array
        """
        return self._interpolate("precipitation", proportion_of_year, x, y)

    def snowfall_at(
        self, proportion_of_year: float, x: Optional[int] = None, y: Optional[int] = None
    ) -> Union[float, np.ndarray]:
        """Normalized snowfall at time t. See precipitation_at."""
        return self._interpolate("snowfall", proportion_of_year, x, y)

    def temperature_at(
        self, proportion_of_year: float, x: Optional[int] = None, y: Optional[int] = None
    ) -> Union[float, np.ndarray]:
        """Temperature in K at time t, between each cell's minimum and maximum."""
        if self.temperature_ranges is None:
            raise ValueError("No temperature ranges were provided")
        summer = summer_proportion(proportion_of_year)
        if x is not None and y is not None:
            return float(
                lerp(
                    self.temperature_ranges.minimum[x, y],
                    self.temperature_ranges.maximum[x, y],
                    summer,
                )
            )
        return lerp(self.temperature_ranges.minimum, self.temperature_ranges.maximum, summer)

    def precipitation_range_at(self, proportion_of_year: float) -> FloatRange:
        return FloatRange.of(self.precipitation_at(proportion_of_year))

    def snowfall_range_at(self, proportion_of_year: float) -> FloatRange:
        return FloatRange.of(self.snowfall_at(proportion_of_year))

    def temperature_range_at(self, proportion_of_year: float) -> FloatRange:
        return FloatRange.of(self.temperature_at(proportion_of_year))
