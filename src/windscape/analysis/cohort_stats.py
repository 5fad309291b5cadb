"""Monthly cohort statistics over a region.

For each (year, month) cohort: average the month's frames pixel by pixel, then
reduce that mean raster over the region to mean, sample standard deviation,
10th and 90th percentile in a single joint reduction.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from windscape.analysis.clock import enumerate_cohorts
from windscape.analysis.models import Cohort, CohortStatistics, TimeRange
from windscape.datasources.raster.service import (
    REDUCER_MEAN,
    REDUCER_P10,
    REDUCER_P90,
    REDUCER_STD_DEV,
    REGION_STAT_REDUCERS,
    RasterDataService,
    output_key,
)
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.reference.datasets import DEFAULT_MAX_PIXELS, DEFAULT_SCALE_M
from windscape.reference.geography import Region

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSeries:
    """One band of a time-series dataset on a raster service.

    ``window`` optionally clips every cohort query to an overall date span.
    """

    service: RasterDataService
    dataset_id: str
    band: str
    window: tuple[date, date] | None = None

    def frames_for(self, cohort: Cohort, region: Region) -> Sequence[Any]:
        """Frames timestamped inside the cohort's calendar month (and the window)."""
        start, end = cohort.date_range()
        if self.window is not None:
            start = max(start, self.window[0])
            end = min(end, self.window[1])
            if start > end:
                return []
        return self.service.query_time_series(self.dataset_id, self.band, region, (start, end))


def reduce_cohort(
    cohort: Cohort,
    series: TimeSeries,
    region: Region,
    *,
    scale: float = DEFAULT_SCALE_M,
    max_pixels: int = DEFAULT_MAX_PIXELS,
) -> CohortStatistics:
    """Reduce one cohort to spatial statistics.

    Args:
        cohort: The (year, month) bucket.
        series: Source band and service.
        region: Reduction geometry.
        scale: Nominal reduction scale in meters.
        max_pixels: Upper bound on pixels the service may reduce.

    Returns:
        CohortStatistics; all fields ``None`` when the cohort has no frames or
        no valid pixels in the region.

    Raises:
        ConfigurationError: Invalid region or scale.
        ExternalServiceError: Service failure or malformed reduction output.
    """
    _check_inputs(region, scale, max_pixels)

    frames = series.frames_for(cohort, region)
    if not frames:
        logger.debug("No %s frames for %d-%02d", series.band, cohort.year, cohort.month)
        return CohortStatistics.empty(cohort)

    mean_raster = series.service.temporal_mean(frames)
    stats = series.service.region_reduce(
        mean_raster, region, REGION_STAT_REDUCERS, scale, max_pixels
    )
    return _statistics_from(cohort, series.band, stats)


def build_monthly_stats(
    time_range: TimeRange,
    series: TimeSeries,
    region: Region,
    *,
    scale: float = DEFAULT_SCALE_M,
    max_pixels: int = DEFAULT_MAX_PIXELS,
    max_workers: int = 1,
) -> list[CohortStatistics]:
    """Statistics for every cohort of ``time_range``, in cohort order.

    The result always has one entry per cohort; months without data come back
    as all-``None`` records rather than being dropped.

    Args:
        time_range: Inclusive year span.
        series: Source band and service.
        region: Reduction geometry.
        scale: Nominal reduction scale in meters.
        max_pixels: Upper bound on pixels per reduction.
        max_workers: Cohorts reduced concurrently (1 = sequential).

    Raises:
        ConfigurationError: Invalid inputs; raised before any service call.
        ExternalServiceError: Any cohort's reduction failed (no partial result).
    """
    _check_inputs(region, scale, max_pixels)
    if max_workers < 1:
        msg = f"max_workers must be >= 1, got {max_workers}"
        raise ConfigurationError(msg)

    cohorts = enumerate_cohorts(time_range)

    def _reduce(cohort: Cohort) -> CohortStatistics:
        return reduce_cohort(cohort, series, region, scale=scale, max_pixels=max_pixels)

    if max_workers == 1:
        return [_reduce(c) for c in cohorts]

    # Executor.map yields in submission order, so cohort order is preserved
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_reduce, cohorts))


def _check_inputs(region: Region, scale: float, max_pixels: int) -> None:
    if not isinstance(region, Region):
        msg = f"region must be a Region, got {type(region).__name__}"
        raise ConfigurationError(msg)
    if not scale > 0:
        msg = f"scale must be positive, got {scale!r}"
        raise ConfigurationError(msg)
    if max_pixels <= 0:
        msg = f"max_pixels must be positive, got {max_pixels!r}"
        raise ConfigurationError(msg)


def _statistics_from(
    cohort: Cohort, band: str, stats: Mapping[str, float | None]
) -> CohortStatistics:
    """Validate the reduction output keys and build the record.

    The four statistics come from one reduction over one pixel mask, so they
    are either all present or all null.
    """
    keys = {name: output_key(band, name) for name in REGION_STAT_REDUCERS}
    missing = sorted(k for k in keys.values() if k not in stats)
    if missing:
        msg = f"Region reduction for {cohort.year}-{cohort.month:02d} missing {', '.join(missing)}"
        raise ExternalServiceError(msg)

    values: dict[str, float | None] = {}
    for name, key in keys.items():
        value = stats[key]
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            msg = f"Non-numeric {key} for {cohort.year}-{cohort.month:02d}: {value!r}"
            raise ExternalServiceError(msg)
        values[name] = None if value is None else float(value)

    if any(v is None for v in values.values()):
        return CohortStatistics.empty(cohort)

    return CohortStatistics(
        cohort=cohort,
        mean=values[REDUCER_MEAN],
        std_dev=values[REDUCER_STD_DEV],
        p10=values[REDUCER_P10],
        p90=values[REDUCER_P90],
    )
