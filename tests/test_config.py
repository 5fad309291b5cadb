"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from windscape.config import Settings
from windscape.errors import ConfigurationError
from windscape.reference import WIND_SPEED_PALETTE


class TestDefaults:
    """Defaults reproduce the Sudan 2006-2007 study."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.region_iso3 == "SDN"
        assert settings.variable_dataset == "NASA/FLDAS/NOAH01/C/GL/M/V001"
        assert settings.variable_band == "Wind_f_tavg"
        assert settings.terrain_dataset == "USGS/SRTMGL1_003"
        assert settings.terrain_band == "elevation"
        assert settings.scale_m == 11_000
        assert settings.max_pixels == 1_000_000_000
        assert settings.sample_count == 500
        assert settings.sample_seed == 123
        assert settings.histogram_buckets == 30
        assert settings.legend_palette == list(WIND_SPEED_PALETTE)
        assert settings.backend == "earthengine"

    def test_time_range(self) -> None:
        time_range = Settings(_env_file=None).time_range()
        assert (time_range.start_year, time_range.end_year) == (2006, 2007)

    def test_palette_not_shared(self) -> None:
        first = Settings(_env_file=None)
        first.legend_palette.append("#000000")
        assert Settings(_env_file=None).legend_palette == list(WIND_SPEED_PALETTE)


class TestEnvironment:
    """Environment variables override defaults."""

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WINDSCAPE_START_YEAR", "2010")
        monkeypatch.setenv("WINDSCAPE_END_YEAR", "2012")
        monkeypatch.setenv("WINDSCAPE_BACKEND", "local")
        monkeypatch.setenv("WINDSCAPE_DATA_DIR", "/tmp/windscape")
        monkeypatch.setenv("WINDSCAPE_LEGEND_PALETTE", '["#000000", "#ffffff"]')

        settings = Settings(_env_file=None)

        assert settings.time_range().years == [2010, 2011, 2012]
        assert settings.backend == "local"
        assert settings.data_dir == Path("/tmp/windscape")
        assert settings.legend_palette == ["#000000", "#ffffff"]

    def test_reversed_years(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WINDSCAPE_START_YEAR", "2008")
        monkeypatch.setenv("WINDSCAPE_END_YEAR", "2006")
        with pytest.raises(ConfigurationError):
            Settings(_env_file=None).time_range()

    def test_unknown_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WINDSCAPE_BACKEND", "gdal")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_non_positive_scale(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, scale_m=0)

    @pytest.mark.parametrize("field", ["sample_count", "histogram_buckets"])
    @pytest.mark.parametrize("value", [0, -5])
    def test_non_positive_counts(self, field: str, value: int) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
