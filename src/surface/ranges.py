"""
Value types shared by the climate and surface map modules.

FloatRange describes a (minimum, average, maximum) triple for a single
quantity; RangeGrid holds one such triple per grid cell as three parallel
arrays. FreezeInterval marks the part of the year during which a condition
(sea ice, snow cover) holds, as proportions of the year in [0, 1).
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

import numpy as np

from src.surface.errors import check_shape


def readonly_array(values, dtype=np.float64) -> np.ndarray:
    """Copy values into a new array and mark it read-only."""
    arr = np.array(values, dtype=dtype, copy=True)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class FloatRange:
    """
    Immutable (minimum, average, maximum) triple.

    The average need not be the midpoint, but must lie within the bounds.

    Examples:
        >>> FloatRange.from_bounds(0.0, 1.0).average
        0.5
        >>> FloatRange.ZERO.is_zero
        True
    """

    minimum: float
    """Lowest value."""

    average: float
    """Mean value."""

    maximum: float
    """Highest value."""

    ZERO: ClassVar["FloatRange"]
    ZERO_TO_ONE: ClassVar["FloatRange"]

    def __post_init__(self):
        if self.minimum > self.average or self.average > self.maximum:
            raise ValueError(
                f"Range must satisfy minimum <= average <= maximum, got "
                f"({self.minimum}, {self.average}, {self.maximum})"
            )

    @classmethod
    def from_value(cls, value: float) -> "FloatRange":
        """Degenerate range where all three values are equal."""
        value = float(value)
        return cls(value, value, value)

    @classmethod
    def from_bounds(cls, minimum: float, maximum: float) -> "FloatRange":
        """Range whose average is the midpoint of the bounds."""
        minimum, maximum = float(minimum), float(maximum)
        return cls(minimum, (minimum + maximum) / 2, maximum)

    @classmethod
    def of(cls, values: np.ndarray) -> "FloatRange":
        """Scan an array for its minimum, mean and maximum."""
        values = np.asarray(values, dtype=np.float64)
        if values.size == 0:
            return cls.ZERO
        lo = float(np.min(values))
        hi = float(np.max(values))
        # Summation error can push the mean of a constant array past its bounds
        mean = min(max(float(np.mean(values)), lo), hi)
        return cls(lo, mean, hi)

    @property
    def is_zero(self) -> bool:
        return self.minimum == 0 and self.average == 0 and self.maximum == 0

    def scaled(self, factor: float) -> "FloatRange":
        """Multiply all three values by a non-negative factor."""
        if factor < 0:
            raise ValueError(f"Scale factor must be non-negative, got {factor}")
        return FloatRange(
            self.minimum * factor, self.average * factor, self.maximum * factor
        )

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.minimum, self.average, self.maximum)


FloatRange.ZERO = FloatRange(0.0, 0.0, 0.0)
FloatRange.ZERO_TO_ONE = FloatRange(0.0, 0.5, 1.0)


class RangeGrid:
    """
    Per-cell ranges stored as three parallel arrays of identical shape.

    Attributes:
        minimum: Per-cell minimum values
        average: Per-cell average values
        maximum: Per-cell maximum values
    """

    def __init__(
        self,
        minimum: np.ndarray,
        maximum: np.ndarray,
        average: Optional[np.ndarray] = None,
    ):
        minimum = np.asarray(minimum, dtype=np.float64)
        maximum = np.asarray(maximum, dtype=np.float64)
        check_shape("maximum", maximum, minimum.shape)
        if average is None:
            average = (minimum + maximum) / 2
        else:
            average = np.asarray(average, dtype=np.float64)
            check_shape("average", average, minimum.shape)

        self.minimum = readonly_array(minimum)
        self.average = readonly_array(average)
        self.maximum = readonly_array(maximum)

    @classmethod
    def from_bounds(cls, minimum: np.ndarray, maximum: np.ndarray) -> "RangeGrid":
        """Build from min/max grids with the midpoint as average."""
        return cls(minimum, maximum)

    @classmethod
    def constant(cls, shape: Tuple[int, ...], value: FloatRange) -> "RangeGrid":
        """Grid where every cell holds the same range."""
        return cls(
            np.full(shape, value.minimum),
            np.full(shape, value.maximum),
            np.full(shape, value.average),
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.minimum.shape

    def at(self, x: int, y: int) -> FloatRange:
        return FloatRange(
            float(self.minimum[x, y]),
            float(self.average[x, y]),
            float(self.maximum[x, y]),
        )

    def summary(self) -> FloatRange:
        """Area-wide range: min of minimums, mean of averages, max of maximums."""
        if self.minimum.size == 0:
            return FloatRange.ZERO
        lo = float(np.min(self.minimum))
        hi = float(np.max(self.maximum))
        mean = min(max(float(np.mean(self.average)), lo), hi)
        return FloatRange(lo, mean, hi)

    def __repr__(self) -> str:
        return f"RangeGrid(shape={self.shape})"


@dataclass(frozen=True)
class FreezeInterval:
    """
    Portion of the year during which a freeze condition holds.

    A start greater than finish wraps across the year boundary. (0, 0) means
    the condition never holds and (0, 1) means it holds all year.
    """

    start: float
    finish: float

    NEVER: ClassVar["FreezeInterval"]
    ALWAYS: ClassVar["FreezeInterval"]

    @property
    def is_never(self) -> bool:
        return self.start == 0 and self.finish == 0

    def contains(self, proportion_of_year: float) -> bool:
        """Whether the condition holds at the given proportion of the year."""
        if self.is_never:
            return False
        t = proportion_of_year
        if self.start > self.finish:
            return t >= self.start or t <= self.finish
        return self.start <= t <= self.finish


FreezeInterval.NEVER = FreezeInterval(0.0, 0.0)
FreezeInterval.ALWAYS = FreezeInterval(0.0, 1.0)


class FreezeIntervalGrid:
    """Per-cell freeze intervals as parallel start/finish arrays."""

    def __init__(self, start: np.ndarray, finish: np.ndarray):
        start = np.asarray(start, dtype=np.float64)
        finish = np.asarray(finish, dtype=np.float64)
        check_shape("finish", finish, start.shape)
        self.start = readonly_array(start)
        self.finish = readonly_array(finish)

    @classmethod
    def never(cls, shape: Tuple[int, ...]) -> "FreezeIntervalGrid":
        return cls(np.zeros(shape), np.zeros(shape))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.start.shape

    def at(self, x: int, y: int) -> FreezeInterval:
        return FreezeInterval(float(self.start[x, y]), float(self.finish[x, y]))

    def active_at(self, proportion_of_year: float) -> np.ndarray:
        """Boolean grid of cells where the condition holds at time t."""
        t = proportion_of_year
        never = (self.start == 0) & (self.finish == 0)
        wrapped = self.start > self.finish
        inside = np.where(
            wrapped,
            (t >= self.start) | (t <= self.finish),
            (self.start <= t) & (t <= self.finish),
        )
        return inside & ~never

    def coverage(self) -> np.ndarray:
        """Fraction of the year each cell spends in the frozen state."""
        length = np.where(
            self.start > self.finish,
            1.0 - self.start + self.finish,
            self.finish - self.start,
        )
        return np.where((self.start == 0) & (self.finish == 0), 0.0, length)

    def __repr__(self) -> str:
        return f"FreezeIntervalGrid(shape={self.shape})"


__all__ = [
    "FloatRange",
    "RangeGrid",
    "FreezeInterval",
    "FreezeIntervalGrid",
    "readonly_array",
]