"""Administrative boundaries from geoBoundaries (https://www.geoboundaries.org).

Public API:
  - client: GEOBOUNDARIES_API, boundary_metadata_url
  - geoboundaries: fetch_country_boundary, load_boundary_file
"""

from windscape.datasources.boundaries.client import GEOBOUNDARIES_API, boundary_metadata_url
from windscape.datasources.boundaries.geoboundaries import (
    fetch_country_boundary,
    load_boundary_file,
)

__all__ = [
    "GEOBOUNDARIES_API",
    "boundary_metadata_url",
    "fetch_country_boundary",
    "load_boundary_file",
]
