"""
Prefect flow computing the monthly statistics, wind speed distribution,
correlation samples and legend.

Run locally:
    python -m windscape.flows.analyze

Run with Prefect dashboard:
    prefect server start &
    python -m windscape.flows.analyze
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prefect import flow, task

from windscape.analysis import (
    TimeSeries,
    build_histogram,
    build_monthly_stats,
    check_sample_count,
    extract_observations,
    generate_legend_bins,
    sample_points,
    summarize_correlation,
)
from windscape.config import Settings, get_settings
from windscape.datasources.boundaries import fetch_country_boundary, load_boundary_file
from windscape.datasources.raster import InMemoryRasterService, RasterDataService, create_service
from windscape.datasources.raster.files import load_collection, load_image
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.reference.geography import Region
from windscape.store import DataStore
from windscape.tables import (
    correlation_summary_to_dict,
    correlation_table,
    histogram_table,
    legend_table,
    monthly_stats_table,
)

if TYPE_CHECKING:
    from prefect.client.schemas.objects import TaskRun
    from prefect.states import State

store = DataStore(get_settings().data_dir)

# Relative paths within the store
REGION_PATH = Path("reference/region.json")
MONTHLY_STATS_PATH = Path("derived/monthly_stats.json")
CORRELATION_PATH = Path("derived/correlation.json")
LEGEND_PATH = Path("derived/legend.json")
HISTOGRAM_PATH = Path("derived/histogram.json")

REGION_TTL = timedelta(days=90)


@lru_cache(maxsize=4)
def _service_for(
    backend: str,
    project: str | None,
    variable: tuple[str, str, Path | None],
    terrain: tuple[str, str, Path | None],
) -> RasterDataService:
    service = create_service(backend, project=project)
    if isinstance(service, InMemoryRasterService):
        archives = ((variable, load_collection), (terrain, load_image))
        for (dataset_id, band, path), loader in archives:
            if path is None:
                msg = f"backend 'local' needs an archive for {dataset_id}/{band}"
                raise ConfigurationError(msg)
            loader(service, path, dataset_id, band)
    return service


def get_service(settings: Settings) -> RasterDataService:
    """Raster service for the configured backend (one per configuration)."""
    return _service_for(
        settings.backend,
        settings.ee_project,
        (settings.variable_dataset, settings.variable_band, settings.local_variable_path),
        (settings.terrain_dataset, settings.terrain_band, settings.local_terrain_path),
    )


def _variable_series(settings: Settings, service: RasterDataService) -> TimeSeries:
    return TimeSeries(
        service=service,
        dataset_id=settings.variable_dataset,
        band=settings.variable_band,
        window=settings.time_range().date_range(),
    )


def _mean_variable_raster(
    settings: Settings, service: RasterDataService, region: Region, purpose: str
) -> Any:
    """Per-pixel mean of the variable band over the whole configured time range."""
    window = settings.time_range().date_range()
    frames = service.query_time_series(
        settings.variable_dataset, settings.variable_band, region, window
    )
    if not frames:
        msg = (
            f"No {settings.variable_band} frames between {window[0]} and {window[1]}; "
            f"nothing to {purpose}"
        )
        raise ConfigurationError(msg)
    return service.temporal_mean(frames)


def _retry_on_service_error(task: Any, task_run: TaskRun, state: State) -> bool:
    """Retry only raster or HTTP service failures; bad configuration is final."""
    try:
        state.result()
    except ExternalServiceError:
        return True
    except Exception:
        return False
    return False


# =============================================================================
# Tasks
# =============================================================================


@task(
    name="load-region",
    retries=2,
    retry_delay_seconds=5,
    retry_condition_fn=_retry_on_service_error,
)
def load_region(settings: Settings) -> dict[str, Any]:
    """Region GeoJSON: local file, else cached boundary, else geoBoundaries."""
    if settings.region_geojson is not None:
        print(f"Reading region from {settings.region_geojson}")
        return load_boundary_file(settings.region_geojson)

    if store.is_fresh(REGION_PATH):
        print("Region boundary is fresh, skipping fetch.")
        cached: dict[str, Any] = store.read(REGION_PATH) or {}
        return cached

    print(f"Fetching {settings.region_iso3} boundary from geoBoundaries...")
    geojson = fetch_country_boundary(settings.region_iso3)
    store.write(
        REGION_PATH,
        geojson,
        source="geoboundaries.org",
        valid_until=datetime.now(UTC) + REGION_TTL,
        iso3=settings.region_iso3,
    )
    return geojson


@task(
    name="compute-monthly-stats",
    retries=2,
    retry_delay_seconds=5,
    retry_condition_fn=_retry_on_service_error,
)
def compute_monthly_stats(
    settings: Settings, region_geojson: dict[str, Any]
) -> list[dict[str, Any]]:
    """Per-(year, month) region statistics as table rows."""
    region = Region.from_geojson(region_geojson, name=settings.region_name)
    time_range = settings.time_range()
    service = get_service(settings)

    stats = build_monthly_stats(
        time_range,
        _variable_series(settings, service),
        region,
        scale=settings.scale_m,
        max_pixels=settings.max_pixels,
        max_workers=settings.max_workers,
    )
    return monthly_stats_table(stats)


@task(
    name="compute-correlation",
    retries=2,
    retry_delay_seconds=5,
    retry_condition_fn=_retry_on_service_error,
)
def compute_correlation(settings: Settings, region_geojson: dict[str, Any]) -> dict[str, Any]:
    """Sample points and extract mean wind and terrain at each.

    The wind raster is the mean over the whole configured time range.
    """
    region = Region.from_geojson(region_geojson, name=settings.region_name)
    service = get_service(settings)

    # Fail fast on a bad sample count before any raster query
    points = sample_points(service, region, settings.sample_count, settings.sample_seed)

    variable_raster = _mean_variable_raster(settings, service, region, "correlate")
    terrain_raster = service.load_image(settings.terrain_dataset, settings.terrain_band, region)

    pairs = extract_observations(
        points,
        variable_raster,
        terrain_raster,
        service=service,
        variable_band=settings.variable_band,
        terrain_band=settings.terrain_band,
        scale=settings.scale_m,
    )
    return {
        "variable_band": settings.variable_band,
        "terrain_band": settings.terrain_band,
        "rows": correlation_table(
            pairs,
            variable_band=settings.variable_band,
            terrain_band=settings.terrain_band,
            include_location=True,
        ),
        "summary": correlation_summary_to_dict(summarize_correlation(pairs)),
    }


@task(
    name="compute-histogram",
    retries=2,
    retry_delay_seconds=5,
    retry_condition_fn=_retry_on_service_error,
)
def compute_histogram(settings: Settings, region_geojson: dict[str, Any]) -> list[dict[str, Any]]:
    """Distribution of the time-range mean wind over the region."""
    region = Region.from_geojson(region_geojson, name=settings.region_name)
    service = get_service(settings)

    variable_raster = _mean_variable_raster(settings, service, region, "bucket")
    buckets = build_histogram(
        variable_raster,
        region,
        service=service,
        band=settings.variable_band,
        scale=settings.scale_m,
        max_pixels=settings.max_pixels,
        max_buckets=settings.histogram_buckets,
    )
    return histogram_table(buckets)


@task(name="compute-legend")
def compute_legend(settings: Settings) -> list[dict[str, Any]]:
    """Legend bins for the configured stretch and palette."""
    bins = generate_legend_bins(settings.legend_min, settings.legend_max, settings.legend_palette)
    return legend_table(bins)


@task(name="save-monthly-stats")
def save_monthly_stats(rows: list[dict[str, Any]], settings: Settings) -> Path:
    """Save the monthly statistics table via store."""
    return store.write(
        MONTHLY_STATS_PATH,
        rows,
        source=settings.backend,
        dataset=settings.variable_dataset,
        band=settings.variable_band,
        region=settings.region_name,
        start_year=settings.start_year,
        end_year=settings.end_year,
        scale_m=settings.scale_m,
    )


@task(name="save-correlation")
def save_correlation(correlation: dict[str, Any], settings: Settings) -> Path:
    """Save the correlation samples and trendline summary via store."""
    return store.write(
        CORRELATION_PATH,
        correlation,
        source=settings.backend,
        region=settings.region_name,
        sample_count=settings.sample_count,
        seed=settings.sample_seed,
        scale_m=settings.scale_m,
    )


@task(name="save-histogram")
def save_histogram(rows: list[dict[str, Any]], settings: Settings) -> Path:
    """Save the wind speed distribution via store."""
    return store.write(
        HISTOGRAM_PATH,
        rows,
        source=settings.backend,
        band=settings.variable_band,
        region=settings.region_name,
        start_year=settings.start_year,
        end_year=settings.end_year,
        scale_m=settings.scale_m,
        max_buckets=settings.histogram_buckets,
    )


@task(name="save-legend")
def save_legend(rows: list[dict[str, Any]]) -> Path:
    """Save legend bins via store."""
    return store.write(LEGEND_PATH, rows, source="config")


# =============================================================================
# Flow
# =============================================================================


@flow(name="analyze-region", log_prints=True)
def analyze_all(settings: Settings | None = None) -> dict[str, Any]:
    """
    Compute and store every output table.

    Configuration problems (years, sample count, legend) fail before the
    region is loaded or any raster query is made. Only service failures are
    retried; anything else aborts the run on the first attempt.
    """
    settings = settings or get_settings()
    results: dict[str, Any] = {}

    # Validate cheap configuration up front
    time_range = settings.time_range()
    check_sample_count(settings.sample_count)
    legend_rows = compute_legend(settings)
    save_legend(legend_rows)
    results["legend_bins"] = len(legend_rows)

    region_geojson = load_region(settings)

    print(
        f"Computing monthly {settings.variable_band} statistics for {settings.region_name}, "
        f"{time_range.start_year}-{time_range.end_year}..."
    )
    stats_rows = compute_monthly_stats(settings, region_geojson)
    stats_path = save_monthly_stats(stats_rows, settings)
    with_data = sum(1 for r in stats_rows if r["wind_speed"] is not None)
    print(f"Saved {len(stats_rows)} monthly rows ({with_data} with data) to {stats_path}")
    results["monthly_rows"] = len(stats_rows)
    results["monthly_rows_with_data"] = with_data

    histogram_rows = compute_histogram(settings, region_geojson)
    hist_path = save_histogram(histogram_rows, settings)
    print(f"Saved {len(histogram_rows)} histogram buckets to {hist_path}")
    results["histogram_buckets"] = len(histogram_rows)

    print(f"Sampling {settings.sample_count} points (seed {settings.sample_seed})...")
    correlation = compute_correlation(settings, region_geojson)
    corr_path = save_correlation(correlation, settings)
    summary = correlation["summary"]
    print(f"Saved {len(correlation['rows'])} samples to {corr_path} (R² = {summary['r_squared']})")
    results["correlation_rows"] = len(correlation["rows"])
    results["r_squared"] = summary["r_squared"]

    return results


if __name__ == "__main__":
    result = analyze_all()
    print(f"Flow complete: {result}")
