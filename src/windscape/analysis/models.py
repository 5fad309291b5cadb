"""Analysis data models.

All records are frozen: they are produced once per pipeline run and never
mutated afterwards.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date

from windscape.errors import ConfigurationError
from windscape.reference.datasets import EARLIEST_YEAR


@dataclass(frozen=True)
class TimeRange:
    """Inclusive span of calendar years."""

    start_year: int
    end_year: int

    def __post_init__(self) -> None:
        for label, value in (("start_year", self.start_year), ("end_year", self.end_year)):
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{label} must be an integer, got {value!r}"
                raise ConfigurationError(msg)
            if value < EARLIEST_YEAR:
                msg = f"{label} {value} predates source data availability ({EARLIEST_YEAR})"
                raise ConfigurationError(msg)
        if self.start_year > self.end_year:
            msg = f"start_year ({self.start_year}) must be <= end_year ({self.end_year})"
            raise ConfigurationError(msg)

    @property
    def years(self) -> list[int]:
        return list(range(self.start_year, self.end_year + 1))

    def date_range(self) -> tuple[date, date]:
        """First and last day covered (inclusive)."""
        return date(self.start_year, 1, 1), date(self.end_year, 12, 31)


@dataclass(frozen=True, order=True)
class Cohort:
    """A (year, month) grouping bucket. Orders year-major, month-minor."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            msg = f"month must be in 1..12, got {self.month}"
            raise ConfigurationError(msg)

    def date_range(self) -> tuple[date, date]:
        """First and last day of the month (inclusive)."""
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, 1), date(self.year, self.month, last_day)


@dataclass(frozen=True)
class CohortStatistics:
    """Spatial statistics of one cohort's mean raster over the region.

    All four fields are ``None`` together when the cohort has no frames or no
    valid pixels inside the region.
    """

    cohort: Cohort
    mean: float | None = None
    std_dev: float | None = None
    p10: float | None = None
    p90: float | None = None

    @classmethod
    def empty(cls, cohort: Cohort) -> CohortStatistics:
        return cls(cohort=cohort)

    @property
    def has_data(self) -> bool:
        return self.mean is not None


@dataclass(frozen=True)
class SampledPoint:
    """One random sample location. ``id`` is its position in the sample."""

    id: int
    lon: float
    lat: float

    @property
    def location(self) -> tuple[float, float]:
        return (self.lon, self.lat)


@dataclass(frozen=True)
class ObservationPair:
    """Variable and terrain values extracted at a sampled point."""

    point: SampledPoint
    variable_value: float | None
    terrain_value: float | None

    @property
    def is_complete(self) -> bool:
        return self.variable_value is not None and self.terrain_value is not None


@dataclass(frozen=True)
class CorrelationSummary:
    """Least-squares fit of variable (y) against terrain (x).

    Fields other than ``n`` are ``None`` when the fit is undefined (fewer than
    two complete pairs, or constant terrain values).
    """

    n: int
    slope: float | None = None
    intercept: float | None = None
    r_squared: float | None = None


@dataclass(frozen=True)
class LegendBin:
    """One legend entry: ``[lower_bound, upper_bound)`` drawn in ``color``.

    ``upper_bound`` is ``None`` for the final, open-ended bin.
    """

    color: str
    lower_bound: float
    upper_bound: float | None

    @property
    def is_open(self) -> bool:
        return self.upper_bound is None

    @property
    def label(self) -> str:
        """Display label, e.g. ``"0.38 - 1.66"`` or ``"7.01+"``."""
        if self.upper_bound is None:
            return f"{self.lower_bound:.2f}+"
        return f"{self.lower_bound:.2f} - {self.upper_bound:.2f}"

    def contains(self, value: float) -> bool:
        if math.isnan(value) or value < self.lower_bound:
            return False
        return self.upper_bound is None or value < self.upper_bound


@dataclass(frozen=True)
class HistogramBucket:
    """Pixel frequency of one ``[lower_bound, upper_bound)`` value bucket.

    ``count`` can be fractional where the service weights edge pixels.
    """

    lower_bound: float
    upper_bound: float
    count: float
