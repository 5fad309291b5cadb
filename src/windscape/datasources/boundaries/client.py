"""geoBoundaries API constants.

API docs: https://www.geoboundaries.org/api.html

The metadata endpoint returns a JSON object whose ``gjDownloadURL`` points at
the full-resolution GeoJSON FeatureCollection.
"""

GEOBOUNDARIES_API = "https://www.geoboundaries.org/api/current/gbOpen"

# Admin levels offered by geoBoundaries
ADM_LEVELS = ("ADM0", "ADM1", "ADM2", "ADM3", "ADM4", "ADM5")


def boundary_metadata_url(iso3: str, adm_level: str = "ADM0") -> str:
    """Metadata URL for a country/admin level, e.g. ``.../gbOpen/SDN/ADM0/``."""
    return f"{GEOBOUNDARIES_API}/{iso3.upper()}/{adm_level.upper()}/"
