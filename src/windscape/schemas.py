"""
Output row schemas.

Pydantic models for the rows of the tables the pipeline publishes. Tables are
validated through these before they reach the store or a CSV export, so a
malformed record fails loudly instead of producing a silently shifted column.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, create_model

# =============================================================================
# Monthly statistics
# =============================================================================

MONTHLY_STATS_COLUMNS: list[str] = ["year", "month", "wind_speed", "std_dev", "p10", "p90"]


class MonthlyStatsRow(BaseModel):
    """One cohort of the monthly statistics table (nulls allowed)."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    wind_speed: float | None = Field(default=None, description="Region mean of the monthly mean")
    std_dev: float | None = None
    p10: float | None = None
    p90: float | None = None


# =============================================================================
# Correlation samples
# =============================================================================

LOCATION_COLUMNS: list[str] = ["point_id", "lon", "lat"]


class SampleLocation(BaseModel):
    """Where a correlation sample was taken."""

    model_config = ConfigDict(frozen=True)

    point_id: int = Field(..., ge=0)
    lon: float = Field(..., ge=-180, le=180)
    lat: float = Field(..., ge=-90, le=90)


@lru_cache
def correlation_row_model(terrain_band: str, variable_band: str) -> type[BaseModel]:
    """Row model whose two value columns are named after the extracted bands.

    e.g. ``correlation_row_model("elevation", "Wind_f_tavg")`` has fields
    ``elevation`` and ``Wind_f_tavg``.
    """
    return create_model(
        "CorrelationRow",
        __config__=ConfigDict(frozen=True),
        **{
            terrain_band: (float | None, None),
            variable_band: (float | None, None),
        },
    )


# =============================================================================
# Legend
# =============================================================================

LEGEND_COLUMNS: list[str] = ["color", "lower_bound", "upper_bound", "label"]


class LegendRow(BaseModel):
    """One legend entry; ``upper_bound`` is null for the open-ended last bin."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    color: str = Field(..., min_length=1)
    lower_bound: float
    upper_bound: float | None = None
    label: str


# =============================================================================
# Distribution histogram
# =============================================================================

HISTOGRAM_COLUMNS: list[str] = ["lower_bound", "upper_bound", "count"]


class HistogramRow(BaseModel):
    """One bucket of the mean wind speed distribution."""

    model_config = ConfigDict(frozen=True)

    lower_bound: float
    upper_bound: float
    count: float = Field(..., ge=0, description="Pixels in the bucket")
