"""In-memory raster backend (numpy + shapely).

Serves frames registered with ``add_frame``/``add_image`` and implements the
service operations locally. Used for offline runs over pre-downloaded grids and
as the collaborator in tests.

Region reductions count a pixel as inside when its center falls inside the
region polygon. When ``scale`` spans two or more pixels, region reductions and
histograms first block-average the grid to that scale (no-data ignored) and
point extraction averages a window of that width. Finer scales use the native
grid.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING

import numpy as np
import shapely

from windscape.datasources.raster.models import GridSpec, RasterFrame
from windscape.datasources.raster.service import (
    REDUCER_MEAN,
    REDUCER_STD_DEV,
    output_key,
    percentile_of,
)
from windscape.errors import ConfigurationError, ExternalServiceError

if TYPE_CHECKING:
    from windscape.reference.geography import Region

# Give up on rejection sampling after this many batches without filling the sample.
_MAX_SAMPLING_ROUNDS = 10_000
_MIN_SAMPLING_BATCH = 256


class InMemoryRasterService:
    """Raster service over numpy grids held in memory."""

    name = "local"

    def __init__(self) -> None:
        self._collections: dict[str, list[RasterFrame]] = {}
        self._images: dict[str, RasterFrame] = {}

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_collection(self, dataset_id: str, frames: Sequence[RasterFrame] = ()) -> None:
        """Register a (possibly empty) time-series dataset."""
        for frame in frames:
            if frame.timestamp is None:
                msg = f"Frames in collection {dataset_id!r} need a timestamp"
                raise ValueError(msg)
        self._collections.setdefault(dataset_id, []).extend(frames)

    def add_frame(self, dataset_id: str, frame: RasterFrame) -> None:
        self.add_collection(dataset_id, [frame])

    def add_image(self, dataset_id: str, image: RasterFrame) -> None:
        """Register a static image (no timestamp needed)."""
        self._images[dataset_id] = image

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query_time_series(
        self,
        dataset_id: str,
        band: str,
        region: Region,
        date_range: tuple[date, date],
    ) -> list[RasterFrame]:
        if dataset_id not in self._collections:
            msg = f"Unknown image collection: {dataset_id}"
            raise ExternalServiceError(msg, service=self.name)

        start, end = date_range
        west, south, east, north = region.bounds
        frames: list[RasterFrame] = []
        for frame in self._collections[dataset_id]:
            if band not in frame.bands:
                msg = f"Collection {dataset_id!r} has no band {band!r}"
                raise ExternalServiceError(msg, service=self.name)
            if frame.timestamp is None or not start <= frame.timestamp <= end:
                continue
            g_west, g_south, g_east, g_north = frame.grid.bounds
            if g_east <= west or g_west >= east or g_north <= south or g_south >= north:
                continue
            frames.append(frame.select(band))
        return frames

    def load_image(self, dataset_id: str, band: str, region: Region) -> RasterFrame:
        image = self._images.get(dataset_id)
        if image is None:
            msg = f"Unknown image: {dataset_id}"
            raise ExternalServiceError(msg, service=self.name)
        if band not in image.bands:
            msg = f"Image {dataset_id!r} has no band {band!r}"
            raise ExternalServiceError(msg, service=self.name)
        return image.select(band)

    # -------------------------------------------------------------------------
    # Raster algebra
    # -------------------------------------------------------------------------

    def temporal_mean(self, frames: Sequence[RasterFrame]) -> RasterFrame:
        if not frames:
            msg = "temporal_mean needs at least one frame"
            raise ValueError(msg)

        grid = frames[0].grid
        names = frames[0].band_names
        for frame in frames[1:]:
            if not frame.grid.matches(grid) or frame.band_names != names:
                msg = "All frames passed to temporal_mean must share grid and bands"
                raise ConfigurationError(msg)

        bands: dict[str, np.ndarray] = {}
        for name in names:
            stack = np.stack([f.bands[name] for f in frames])
            valid = ~np.isnan(stack)
            counts = valid.sum(axis=0)
            totals = np.where(valid, stack, 0.0).sum(axis=0)
            with np.errstate(invalid="ignore", divide="ignore"):
                bands[name] = np.where(counts > 0, totals / counts, np.nan)
        return RasterFrame(grid=grid, bands=bands)

    def stack_bands(self, rasters: Sequence[RasterFrame]) -> RasterFrame:
        if not rasters:
            msg = "stack_bands needs at least one raster"
            raise ValueError(msg)

        grid = rasters[0].grid
        bands: dict[str, np.ndarray] = {}
        for raster in rasters:
            if not raster.grid.matches(grid):
                msg = "Rasters must share a grid before they can be stacked"
                raise ConfigurationError(msg)
            for name, values in raster.bands.items():
                if name in bands:
                    msg = f"Duplicate band {name!r} in stack"
                    raise ConfigurationError(msg)
                bands[name] = values
        return RasterFrame(grid=grid, bands=bands)

    # -------------------------------------------------------------------------
    # Reductions
    # -------------------------------------------------------------------------

    def region_reduce(
        self,
        raster: RasterFrame,
        region: Region,
        reducers: Sequence[str],
        scale: float,
        max_pixels: int,
    ) -> dict[str, float | None]:
        _check_scale(scale)
        for reducer in reducers:
            _check_reducer(reducer)
        raster = _coarsen(raster, scale)
        inside = self._region_mask(raster.grid, region, max_pixels)

        result: dict[str, float | None] = {}
        for band, arr in raster.bands.items():
            values = arr[inside & ~np.isnan(arr)]
            for reducer in reducers:
                result[output_key(band, reducer)] = _apply_reducer(reducer, values)
        return result

    def region_reduce_multi_point(
        self,
        raster: RasterFrame,
        points: Sequence[tuple[float, float]],
        reducer: str,
        scale: float,
    ) -> list[dict[str, float | None]]:
        _check_scale(scale)
        if reducer != REDUCER_MEAN:
            msg = f"Point extraction supports only the {REDUCER_MEAN!r} reducer, got {reducer!r}"
            raise ConfigurationError(msg)

        grid = raster.grid
        radius = int(grid.scale_in_pixels(scale) // 2)
        rows: list[dict[str, float | None]] = []
        for lon, lat in points:
            idx = grid.index_of(lon, lat)
            row: dict[str, float | None] = {}
            for band, arr in raster.bands.items():
                if idx is None:
                    row[band] = None
                    continue
                r, c = idx
                window = arr[
                    max(r - radius, 0) : r + radius + 1,
                    max(c - radius, 0) : c + radius + 1,
                ]
                row[band] = _apply_reducer(REDUCER_MEAN, window[~np.isnan(window)])
            rows.append(row)
        return rows

    def histogram(
        self,
        raster: RasterFrame,
        region: Region,
        band: str,
        max_buckets: int,
        scale: float,
        max_pixels: int,
    ) -> list[tuple[float, float, float]]:
        """Equal-width buckets spanning the in-region min to max (numpy.histogram)."""
        _check_scale(scale)
        if band not in raster.bands:
            msg = f"Raster has no band {band!r}"
            raise ConfigurationError(msg)
        raster = _coarsen(raster.select(band), scale)
        inside = self._region_mask(raster.grid, region, max_pixels)

        arr = raster.bands[band]
        values = arr[inside & ~np.isnan(arr)]
        if values.size == 0:
            return []
        counts, edges = np.histogram(values, bins=max_buckets)
        return [
            (float(lower), float(upper), float(count))
            for lower, upper, count in zip(edges[:-1], edges[1:], counts, strict=True)
        ]

    def random_points(self, region: Region, count: int, seed: int) -> list[tuple[float, float]]:
        """Uniform (in lon/lat) rejection sampling inside the region.

        The generator is seeded per call and the batch size depends only on
        ``count``, so identical arguments always give the identical sequence.
        """
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            msg = f"count must be a positive integer, got {count!r}"
            raise ConfigurationError(msg)

        rng = np.random.default_rng(seed)
        west, south, east, north = region.bounds
        batch = max(2 * count, _MIN_SAMPLING_BATCH)

        accepted: list[tuple[float, float]] = []
        for _ in range(_MAX_SAMPLING_ROUNDS):
            xs = rng.uniform(west, east, batch)
            ys = rng.uniform(south, north, batch)
            hits = shapely.contains_xy(region.geometry, xs, ys)
            for x, y in zip(xs[hits], ys[hits], strict=True):
                accepted.append((float(x), float(y)))
                if len(accepted) == count:
                    return accepted

        msg = f"Could not place {count} points in region {region.name!r}"
        raise ExternalServiceError(msg, service=self.name)

    def _region_mask(self, grid: GridSpec, region: Region, max_pixels: int) -> np.ndarray:
        """Pixels whose center lies inside ``region``, capped at ``max_pixels``."""
        lons, lats = grid.cell_centers()
        inside = shapely.contains_xy(region.geometry, lons, lats)

        n_inside = int(inside.sum())
        if n_inside > max_pixels:
            msg = f"Too many pixels in region: {n_inside} > maxPixels={max_pixels}"
            raise ExternalServiceError(msg, service=self.name)
        return inside


def _check_scale(scale: float) -> None:
    if not scale > 0:
        msg = f"scale must be positive, got {scale!r}"
        raise ConfigurationError(msg)


def _check_reducer(reducer: str) -> None:
    if reducer in (REDUCER_MEAN, REDUCER_STD_DEV) or percentile_of(reducer) is not None:
        return
    msg = f"Unsupported reducer: {reducer!r}"
    raise ConfigurationError(msg)


def _apply_reducer(reducer: str, values: np.ndarray) -> float | None:
    """Apply one reducer to the valid pixel values; None when there are none."""
    if values.size == 0:
        return None
    if reducer == REDUCER_MEAN:
        return float(values.mean())
    if reducer == REDUCER_STD_DEV:
        # sample standard deviation; a single pixel has no spread
        return float(values.std(ddof=1)) if values.size > 1 else 0.0
    pct = percentile_of(reducer)
    if pct is not None:
        return float(np.percentile(values, pct))
    msg = f"Unsupported reducer: {reducer!r}"
    raise ConfigurationError(msg)


def _coarsen(raster: RasterFrame, scale: float) -> RasterFrame:
    """Block-average ``raster`` to ``scale``; unchanged below two pixels per block.

    Partial blocks on the east and south edges average whatever cells they hold.
    """
    grid = raster.grid
    factor = round(grid.scale_in_pixels(scale))
    if factor < 2:
        return raster

    height = -(-grid.height // factor)
    width = -(-grid.width // factor)
    coarse = GridSpec(
        west=grid.west,
        north=grid.north,
        pixel_size=grid.pixel_size * factor,
        width=width,
        height=height,
    )
    bands: dict[str, np.ndarray] = {}
    for name, arr in raster.bands.items():
        padded = np.full((height * factor, width * factor), np.nan)
        padded[: grid.height, : grid.width] = arr
        blocks = padded.reshape(height, factor, width, factor)
        valid = ~np.isnan(blocks)
        counts = valid.sum(axis=(1, 3))
        totals = np.where(valid, blocks, 0.0).sum(axis=(1, 3))
        with np.errstate(invalid="ignore", divide="ignore"):
            bands[name] = np.where(counts > 0, totals / counts, np.nan)
    return RasterFrame(grid=coarse, bands=bands, timestamp=raster.timestamp)
