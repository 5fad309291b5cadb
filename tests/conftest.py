"""Shared fixtures: a small synthetic region with one year of monthly wind grids."""

from __future__ import annotations

from datetime import date

import numpy as np
import pytest

from windscape.datasources.raster import GridSpec, InMemoryRasterService, RasterFrame
from windscape.reference.datasets import TERRAIN_BAND, TERRAIN_DATASET, WIND_BAND, WIND_DATASET
from windscape.reference.geography import Region

# 20x20 grid of 0.1 degree pixels covering lon 30..32, lat 10..12
GRID = GridSpec(west=30.0, north=12.0, pixel_size=0.1, width=20, height=20)


def wind_values(month: int) -> np.ndarray:
    """Wind speed increasing with row (southwards) and with month."""
    rows = np.arange(GRID.height, dtype=float)[:, None]
    return np.broadcast_to(2.0 + 0.1 * month + 0.01 * rows, GRID.shape).copy()


def elevation_values() -> np.ndarray:
    rows = np.arange(GRID.height, dtype=float)[:, None]
    return np.broadcast_to(300.0 + 10.0 * rows, GRID.shape).copy()


@pytest.fixture
def grid() -> GridSpec:
    return GRID


@pytest.fixture
def region() -> Region:
    # Pixel centers of rows/cols 2..17 fall inside
    return Region.from_bounds(30.2, 10.2, 31.8, 11.8, name="Testland")


@pytest.fixture
def service() -> InMemoryRasterService:
    """Monthly wind frames for 2006 only, plus a static elevation image."""
    svc = InMemoryRasterService()
    svc.add_collection(
        WIND_DATASET,
        [
            RasterFrame.single(GRID, WIND_BAND, wind_values(month), timestamp=date(2006, month, 1))
            for month in range(1, 13)
        ],
    )
    svc.add_image(TERRAIN_DATASET, RasterFrame.single(GRID, TERRAIN_BAND, elevation_values()))
    return svc
