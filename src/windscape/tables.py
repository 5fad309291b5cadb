"""Project analysis records onto the published table layouts.

Each function validates rows through ``windscape.schemas`` and returns plain
JSON-compatible dicts in column order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from windscape.schemas import (
    HistogramRow,
    LegendRow,
    MonthlyStatsRow,
    SampleLocation,
    correlation_row_model,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from windscape.analysis.models import (
        CohortStatistics,
        CorrelationSummary,
        HistogramBucket,
        LegendBin,
        ObservationPair,
    )


def monthly_stats_table(stats: Sequence[CohortStatistics]) -> list[dict[str, Any]]:
    """Rows ``{year, month, wind_speed, std_dev, p10, p90}`` in cohort order."""
    return [
        MonthlyStatsRow(
            year=s.cohort.year,
            month=s.cohort.month,
            wind_speed=s.mean,
            std_dev=s.std_dev,
            p10=s.p10,
            p90=s.p90,
        ).model_dump()
        for s in stats
    ]


def correlation_table(
    pairs: Sequence[ObservationPair],
    *,
    variable_band: str,
    terrain_band: str,
    include_location: bool = False,
) -> list[dict[str, Any]]:
    """Rows ``{<terrain_band>, <variable_band>}`` in sample order.

    With ``include_location`` each row is prefixed by ``point_id, lon, lat``.
    """
    row_model = correlation_row_model(terrain_band, variable_band)
    rows: list[dict[str, Any]] = []
    for pair in pairs:
        values = row_model(
            **{terrain_band: pair.terrain_value, variable_band: pair.variable_value}
        ).model_dump()
        if include_location:
            location = SampleLocation(
                point_id=pair.point.id, lon=pair.point.lon, lat=pair.point.lat
            ).model_dump()
            rows.append({**location, **values})
        else:
            rows.append(values)
    return rows


def legend_table(bins: Sequence[LegendBin]) -> list[dict[str, Any]]:
    """Rows ``{color, lower_bound, upper_bound, label}``; last upper bound is None."""
    return [
        LegendRow(
            color=b.color,
            lower_bound=b.lower_bound,
            upper_bound=b.upper_bound,
            label=b.label,
        ).model_dump()
        for b in bins
    ]


def histogram_table(buckets: Sequence[HistogramBucket]) -> list[dict[str, Any]]:
    """Rows ``{lower_bound, upper_bound, count}`` in ascending bucket order."""
    return [
        HistogramRow(
            lower_bound=b.lower_bound, upper_bound=b.upper_bound, count=b.count
        ).model_dump()
        for b in buckets
    ]


def correlation_summary_to_dict(summary: CorrelationSummary) -> dict[str, Any]:
    return {
        "n": summary.n,
        "slope": summary.slope,
        "intercept": summary.intercept,
        "r_squared": summary.r_squared,
    }
