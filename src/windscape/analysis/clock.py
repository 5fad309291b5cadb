"""Cohort enumeration: the (year, month) buckets a time range covers."""

from __future__ import annotations

from windscape.analysis.models import Cohort, TimeRange

MONTHS: tuple[int, ...] = tuple(range(1, 13))


def enumerate_cohorts(time_range: TimeRange) -> list[Cohort]:
    """Every (year, month) in the range, year-major then month-minor.

    Charts read the monthly table positionally, so this order is part of the
    output contract: ``(y, 12)`` is always followed by ``(y + 1, 1)``.

    Args:
        time_range: Inclusive year span.

    Returns:
        ``(end_year - start_year + 1) * 12`` cohorts.
    """
    return [Cohort(year=year, month=month) for year in time_range.years for month in MONTHS]
