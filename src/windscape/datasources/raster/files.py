"""Load pre-downloaded grids into the in-memory backend.

Archive layout (``numpy.savez``)::

    values      float array, (time, rows, cols) for collections or (rows, cols) for images
    dates       ISO date strings, one per time step (collections only)
    west        scalar, longitude of the grid's west edge
    north       scalar, latitude of the grid's north edge
    pixel_size  scalar, pixel size in degrees

NaN cells are no-data.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path  # noqa: TC003 - used at runtime, not just annotations

import numpy as np

from windscape.datasources.raster.local import InMemoryRasterService
from windscape.datasources.raster.models import GridSpec, RasterFrame
from windscape.errors import ConfigurationError


def _read_archive(path: Path) -> tuple[np.ndarray, GridSpec, dict[str, np.ndarray]]:
    if not path.exists():
        msg = f"Grid archive not found: {path}"
        raise ConfigurationError(msg)
    with np.load(path, allow_pickle=False) as npz:
        data = {key: npz[key] for key in npz.files}
    missing = {"values", "west", "north", "pixel_size"} - data.keys()
    if missing:
        msg = f"{path} is missing arrays: {', '.join(sorted(missing))}"
        raise ConfigurationError(msg)
    values = np.asarray(data["values"], dtype=float)
    height, width = values.shape[-2:]
    grid = GridSpec(
        west=float(data["west"]),
        north=float(data["north"]),
        pixel_size=float(data["pixel_size"]),
        width=int(width),
        height=int(height),
    )
    return values, grid, data


def load_collection(
    service: InMemoryRasterService, path: Path, dataset_id: str, band: str
) -> int:
    """Register a time-series archive; returns the number of frames loaded."""
    values, grid, data = _read_archive(path)
    if values.ndim != 3 or "dates" not in data:
        msg = f"{path}: a collection needs 3-D 'values' and a 'dates' array"
        raise ConfigurationError(msg)
    dates = [date.fromisoformat(str(d)) for d in data["dates"]]
    if len(dates) != values.shape[0]:
        msg = f"{path}: {len(dates)} dates for {values.shape[0]} time steps"
        raise ConfigurationError(msg)
    frames = [
        RasterFrame.single(grid, band, values[i], timestamp=dt) for i, dt in enumerate(dates)
    ]
    service.add_collection(dataset_id, frames)
    return len(frames)


def load_image(service: InMemoryRasterService, path: Path, dataset_id: str, band: str) -> None:
    """Register a static 2-D archive (e.g. a DEM resampled to the variable grid)."""
    values, grid, _ = _read_archive(path)
    if values.ndim != 2:
        msg = f"{path}: an image needs 2-D 'values'"
        raise ConfigurationError(msg)
    service.add_image(dataset_id, RasterFrame.single(grid, band, values))
