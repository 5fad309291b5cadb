"""Application configuration loaded from environment variables.

Every field can be overridden with a ``WINDSCAPE_`` prefixed variable or a
``.env`` file, e.g. ``WINDSCAPE_START_YEAR=2010``. List fields take JSON
(``WINDSCAPE_LEGEND_PALETTE='["#000000", "#ffffff"]'``).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from windscape.analysis.models import TimeRange
from windscape.reference.datasets import (
    DEFAULT_MAX_PIXELS,
    DEFAULT_SAMPLE_COUNT,
    DEFAULT_SAMPLE_SEED,
    DEFAULT_SCALE_M,
    TERRAIN_BAND,
    TERRAIN_DATASET,
    WIND_BAND,
    WIND_DATASET,
)
from windscape.reference.visualization import (
    HISTOGRAM_MAX_BUCKETS,
    WIND_SPEED_MAX,
    WIND_SPEED_MIN,
    WIND_SPEED_PALETTE,
)


class Settings(BaseSettings):
    """Runtime settings for the analysis pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="WINDSCAPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "windscape"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")

    # Raster backend
    backend: Literal["earthengine", "local"] = "earthengine"
    ee_project: str | None = None
    # .npz archives for the local backend (see datasources/raster/files.py)
    local_variable_path: Path | None = None
    local_terrain_path: Path | None = None

    # Region: a local GeoJSON file wins over the geoBoundaries lookup
    region_iso3: str = "SDN"
    region_name: str = "Sudan"
    region_geojson: Path | None = None

    # Time span (inclusive years)
    start_year: int = 2006
    end_year: int = 2007

    # Bands
    variable_dataset: str = WIND_DATASET
    variable_band: str = WIND_BAND
    terrain_dataset: str = TERRAIN_DATASET
    terrain_band: str = TERRAIN_BAND

    # Reduction
    scale_m: float = Field(default=DEFAULT_SCALE_M, gt=0)
    max_pixels: int = Field(default=DEFAULT_MAX_PIXELS, gt=0)
    max_workers: int = Field(default=1, ge=1)

    # Sampling
    sample_count: int = Field(default=DEFAULT_SAMPLE_COUNT, gt=0)
    sample_seed: int = DEFAULT_SAMPLE_SEED

    # Distribution histogram
    histogram_buckets: int = Field(default=HISTOGRAM_MAX_BUCKETS, gt=0)

    # Legend
    legend_min: float = WIND_SPEED_MIN
    legend_max: float = WIND_SPEED_MAX
    legend_palette: list[str] = Field(default_factory=lambda: list(WIND_SPEED_PALETTE))

    def time_range(self) -> TimeRange:
        """Validated TimeRange for the configured years."""
        return TimeRange(start_year=self.start_year, end_year=self.end_year)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings (cached)."""
    return Settings()
