"""Core analysis pipeline.

Each module is a pure stage over explicit inputs; anything that touches
pixels goes through a ``RasterDataService``.

Modules:
  - clock: time range -> ordered (year, month) cohorts
  - cohort_stats: cohorts + time series -> per-month region statistics
  - sampling: region + seed -> reproducible random points
  - correlation: points + two rasters -> observation pairs, trendline summary
  - histogram: raster + region -> pixel frequencies in equal-width buckets
  - legend: value range + palette -> equal-width legend bins
  - models: frozen record types shared by all stages

Adding an analysis module
-------------------------
1. Create ``analysis/{name}.py`` with a plain function over models and an
   explicit service argument (no settings lookups, no Prefect decorators).
2. Raise ``ConfigurationError`` for bad inputs before any service call.
3. Wire it into ``flows/analyze.py`` and add tests in ``tests/test_{name}.py``.
"""

from windscape.analysis.clock import enumerate_cohorts
from windscape.analysis.cohort_stats import TimeSeries, build_monthly_stats, reduce_cohort
from windscape.analysis.correlation import extract_observations, summarize_correlation
from windscape.analysis.histogram import build_histogram
from windscape.analysis.legend import bin_for_value, generate_legend_bins
from windscape.analysis.models import (
    Cohort,
    CohortStatistics,
    CorrelationSummary,
    HistogramBucket,
    LegendBin,
    ObservationPair,
    SampledPoint,
    TimeRange,
)
from windscape.analysis.sampling import check_sample_count, sample_points

__all__ = [
    "Cohort",
    "CohortStatistics",
    "CorrelationSummary",
    "HistogramBucket",
    "LegendBin",
    "ObservationPair",
    "SampledPoint",
    "TimeRange",
    "TimeSeries",
    "bin_for_value",
    "build_histogram",
    "build_monthly_stats",
    "check_sample_count",
    "enumerate_cohorts",
    "extract_observations",
    "generate_legend_bins",
    "reduce_cohort",
    "sample_points",
    "summarize_correlation",
]
