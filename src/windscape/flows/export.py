"""
Prefect flow exporting the analysis tables as CSV.

Reads what ``analyze.py`` stored under ``derived/`` and writes one CSV per
table under ``exports/``, named after the region:

    {region}_Wind_Statistics.csv
    {region}_Wind_Speed_Distribution.csv
    {region}_Wind_Elevation_Correlation.csv
    {region}_Wind_Legend.csv

Run locally:
    python -m windscape.flows.export
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prefect import flow, task

from windscape.config import Settings, get_settings
from windscape.flows.analyze import (
    CORRELATION_PATH,
    HISTOGRAM_PATH,
    LEGEND_PATH,
    MONTHLY_STATS_PATH,
)
from windscape.schemas import (
    HISTOGRAM_COLUMNS,
    LEGEND_COLUMNS,
    LOCATION_COLUMNS,
    MONTHLY_STATS_COLUMNS,
)
from windscape.store import DataStore

store = DataStore(get_settings().data_dir)


def _export_path(region_name: str, table: str) -> Path:
    slug = "_".join(region_name.split())
    return Path("exports") / f"{slug}_{table}.csv"


# =============================================================================
# Loading tasks
# =============================================================================


@task(name="load-monthly-stats")
def load_monthly_stats() -> list[dict[str, Any]] | None:
    """Load the monthly statistics table from store."""
    return store.read(MONTHLY_STATS_PATH)


@task(name="load-histogram")
def load_histogram() -> list[dict[str, Any]] | None:
    """Load the wind speed distribution from store."""
    return store.read(HISTOGRAM_PATH)


@task(name="load-correlation")
def load_correlation() -> dict[str, Any] | None:
    """Load correlation samples from store."""
    return store.read(CORRELATION_PATH)


@task(name="load-legend")
def load_legend() -> list[dict[str, Any]] | None:
    """Load legend bins from store."""
    return store.read(LEGEND_PATH)


# =============================================================================
# Export tasks
# =============================================================================


@task(name="export-monthly-stats")
def export_monthly_stats(rows: list[dict[str, Any]], region_name: str) -> Path:
    return store.write_csv(
        _export_path(region_name, "Wind_Statistics"),
        rows,
        columns=MONTHLY_STATS_COLUMNS,
        source="derived/monthly_stats.json",
        region=region_name,
    )


@task(name="export-histogram")
def export_histogram(rows: list[dict[str, Any]], region_name: str) -> Path:
    return store.write_csv(
        _export_path(region_name, "Wind_Speed_Distribution"),
        rows,
        columns=HISTOGRAM_COLUMNS,
        source="derived/histogram.json",
        region=region_name,
    )


@task(name="export-correlation")
def export_correlation(
    correlation: dict[str, Any], region_name: str, include_location: bool = False
) -> Path:
    """Write the correlation samples.

    The published layout is just the two band columns (terrain first); the
    sample id and coordinates are only kept with ``include_location``.
    """
    value_columns = [correlation["terrain_band"], correlation["variable_band"]]
    columns = [*LOCATION_COLUMNS, *value_columns] if include_location else value_columns
    rows = [{c: row.get(c) for c in columns} for row in correlation["rows"]]
    return store.write_csv(
        _export_path(region_name, "Wind_Elevation_Correlation"),
        rows,
        columns=columns,
        source="derived/correlation.json",
        region=region_name,
        **{f"summary_{k}": v for k, v in correlation.get("summary", {}).items()},
    )


@task(name="export-legend")
def export_legend(rows: list[dict[str, Any]], region_name: str) -> Path:
    return store.write_csv(
        _export_path(region_name, "Wind_Legend"),
        rows,
        columns=LEGEND_COLUMNS,
        source="derived/legend.json",
        region=region_name,
    )


# =============================================================================
# Flow
# =============================================================================


@flow(name="export-tables", log_prints=True)
def export_all(
    settings: Settings | None = None, include_location: bool = False
) -> dict[str, str]:
    """Export every stored table; tables not yet computed are skipped."""
    settings = settings or get_settings()
    region_name = settings.region_name
    written: dict[str, str] = {}

    stats = load_monthly_stats()
    if stats is None:
        print("No monthly statistics in store. Run 'windscape analyze' first.")
    else:
        path = export_monthly_stats(stats, region_name)
        print(f"Wrote {len(stats)} rows to {path}")
        written["monthly_stats"] = str(path)

    histogram = load_histogram()
    if histogram is None:
        print("No wind speed distribution in store. Run 'windscape analyze' first.")
    else:
        path = export_histogram(histogram, region_name)
        print(f"Wrote {len(histogram)} buckets to {path}")
        written["histogram"] = str(path)

    correlation = load_correlation()
    if correlation is None:
        print("No correlation samples in store. Run 'windscape analyze' first.")
    else:
        path = export_correlation(correlation, region_name, include_location)
        print(f"Wrote {len(correlation['rows'])} rows to {path}")
        written["correlation"] = str(path)

    legend = load_legend()
    if legend is None:
        print("No legend in store. Run 'windscape analyze' first.")
    else:
        path = export_legend(legend, region_name)
        print(f"Wrote {len(legend)} legend bins to {path}")
        written["legend"] = str(path)

    return written


if __name__ == "__main__":
    result = export_all()
    print(f"Flow complete: {result}")
