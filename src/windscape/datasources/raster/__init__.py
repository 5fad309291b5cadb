"""Raster Data Service backends.

The analysis core talks to rasters only through ``RasterDataService``
(see ``service.py``). Two backends ship:

    earthengine.py   Google Earth Engine (lazy ee.Image frames, server-side reductions)
    local.py         numpy/shapely grids held in memory (offline runs, tests)
    files.py         .npz loaders for the in-memory backend

Adding a backend
----------------
1. Create ``datasources/raster/{name}.py`` with a class implementing every
   ``RasterDataService`` method. Reduction outputs must use the
   ``<band>_<reducer>`` key convention (``output_key``).
2. Raise ``ExternalServiceError`` for remote failures and malformed responses;
   never substitute default values.
3. Add a branch to ``create_service`` below and tests in
   ``tests/test_raster_{name}.py``.
"""

from __future__ import annotations

from windscape.datasources.raster.local import InMemoryRasterService
from windscape.datasources.raster.models import GridSpec, RasterFrame
from windscape.datasources.raster.service import (
    REDUCER_MEAN,
    REDUCER_P10,
    REDUCER_P90,
    REDUCER_STD_DEV,
    REGION_STAT_REDUCERS,
    RasterDataService,
    output_key,
)
from windscape.errors import ConfigurationError


def create_service(backend: str, *, project: str | None = None) -> RasterDataService:
    """Instantiate the raster backend named in settings."""
    if backend == "local":
        return InMemoryRasterService()
    if backend == "earthengine":
        # ee is only imported when the Earth Engine backend is actually used
        from windscape.datasources.raster.earthengine import EarthEngineRasterService

        return EarthEngineRasterService(project)
    msg = f"Unknown raster backend: {backend!r}"
    raise ConfigurationError(msg)


__all__ = [
    "REDUCER_MEAN",
    "REDUCER_P10",
    "REDUCER_P90",
    "REDUCER_STD_DEV",
    "REGION_STAT_REDUCERS",
    "GridSpec",
    "InMemoryRasterService",
    "RasterDataService",
    "RasterFrame",
    "create_service",
    "output_key",
]
