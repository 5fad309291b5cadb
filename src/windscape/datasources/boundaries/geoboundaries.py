"""Fetch country boundaries as GeoJSON."""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003 - used at runtime, not just annotations
from typing import Any

from windscape.datasources.boundaries.client import ADM_LEVELS, boundary_metadata_url
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.services.http import get_json


def fetch_country_boundary(iso3: str, adm_level: str = "ADM0") -> dict[str, Any]:
    """Download the boundary FeatureCollection for a country.

    Args:
        iso3: ISO 3166-1 alpha-3 country code (e.g. ``"SDN"``).
        adm_level: geoBoundaries admin level (``ADM0`` = national outline).

    Returns:
        GeoJSON FeatureCollection dict.

    Raises:
        ConfigurationError: If the code or level is malformed.
        ExternalServiceError: If the API fails or returns an unexpected payload.
    """
    if len(iso3) != 3 or not iso3.isalpha():
        msg = f"Expected an ISO3 country code, got {iso3!r}"
        raise ConfigurationError(msg)
    if adm_level.upper() not in ADM_LEVELS:
        msg = f"Unknown admin level {adm_level!r}; expected one of {', '.join(ADM_LEVELS)}"
        raise ConfigurationError(msg)

    meta = get_json(boundary_metadata_url(iso3, adm_level))
    download_url = meta.get("gjDownloadURL") if isinstance(meta, dict) else None
    if not download_url:
        msg = f"No GeoJSON download URL for {iso3.upper()}/{adm_level.upper()}"
        raise ExternalServiceError(msg, service="geoboundaries")

    geojson = get_json(download_url)
    if not isinstance(geojson, dict) or geojson.get("type") != "FeatureCollection":
        msg = f"Unexpected boundary payload for {iso3.upper()}/{adm_level.upper()}"
        raise ExternalServiceError(msg, service="geoboundaries")
    return geojson


def load_boundary_file(path: Path) -> dict[str, Any]:
    """Read a GeoJSON boundary from disk."""
    if not path.exists():
        msg = f"Region GeoJSON not found: {path}"
        raise ConfigurationError(msg)
    with path.open(encoding="utf-8") as f:
        try:
            data: dict[str, Any] = json.load(f)
        except json.JSONDecodeError as exc:
            msg = f"Region GeoJSON is not valid JSON: {path}"
            raise ConfigurationError(msg) from exc
    return data
