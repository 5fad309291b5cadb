"""Google Earth Engine raster backend.

Frames are lazy ``ee.Image`` objects; only reductions and point sampling call
``getInfo()``. Every server round-trip goes through ``_get_info`` so that Earth
Engine failures surface as ``ExternalServiceError``.

Requires an authenticated Earth Engine account (``earthengine authenticate``).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

import ee

from windscape.datasources.raster.service import REDUCER_MEAN, REDUCER_STD_DEV, percentile_of
from windscape.errors import ConfigurationError, ExternalServiceError

if TYPE_CHECKING:
    from windscape.reference.geography import Region

logger = logging.getLogger(__name__)

SERVICE_NAME = "earthengine"
POINT_ID_PROPERTY = "point_id"


class EarthEngineRasterService:
    """Raster service backed by the Earth Engine Python API."""

    name = SERVICE_NAME

    def __init__(self, project: str | None = None, *, initialize: bool = True) -> None:
        self.project = project
        if initialize:
            self.initialize()

    def initialize(self) -> None:
        """Initialize the Earth Engine client for ``self.project``."""
        try:
            if self.project:
                ee.Initialize(project=self.project)
            else:
                ee.Initialize()
        except Exception as exc:
            msg = "Could not initialize Earth Engine. Have you run 'earthengine authenticate'?"
            raise ExternalServiceError(msg, service=self.name) from exc
        logger.info("Earth Engine initialized (project=%s)", self.project or "default")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query_time_series(
        self,
        dataset_id: str,
        band: str,
        region: Region,
        date_range: tuple[date, date],
    ) -> list[Any]:
        geom = _ee_geometry(region)
        start, end = date_range
        # filterDate's end is exclusive
        collection = (
            ee.ImageCollection(dataset_id)
            .filterBounds(geom)
            .filterDate(start.isoformat(), (end + timedelta(days=1)).isoformat())
            .select(band)
        )
        size = int(self._get_info(collection.size()))
        if size == 0:
            return []
        images = collection.toList(size)
        return [ee.Image(images.get(i)).clip(geom) for i in range(size)]

    def load_image(self, dataset_id: str, band: str, region: Region) -> Any:
        return ee.Image(dataset_id).select(band).clip(_ee_geometry(region))

    # -------------------------------------------------------------------------
    # Raster algebra (lazy)
    # -------------------------------------------------------------------------

    def temporal_mean(self, frames: Sequence[Any]) -> Any:
        if not frames:
            msg = "temporal_mean needs at least one frame"
            raise ValueError(msg)
        return ee.ImageCollection.fromImages(list(frames)).mean()

    def stack_bands(self, rasters: Sequence[Any]) -> Any:
        if not rasters:
            msg = "stack_bands needs at least one raster"
            raise ValueError(msg)
        stacked = rasters[0]
        for raster in rasters[1:]:
            stacked = stacked.addBands(raster)
        return stacked

    # -------------------------------------------------------------------------
    # Reductions
    # -------------------------------------------------------------------------

    def region_reduce(
        self,
        raster: Any,
        region: Region,
        reducers: Sequence[str],
        scale: float,
        max_pixels: int,
    ) -> dict[str, float | None]:
        reducer = _combined_reducer(reducers)
        stats = raster.reduceRegion(
            reducer=reducer,
            geometry=_ee_geometry(region),
            scale=scale,
            maxPixels=max_pixels,
        )
        info = self._get_info(stats)
        if not isinstance(info, dict):
            msg = f"reduceRegion returned {type(info).__name__}, expected a dictionary"
            raise ExternalServiceError(msg, service=self.name)
        return {key: _as_float(value) for key, value in info.items()}

    def region_reduce_multi_point(
        self,
        raster: Any,
        points: Sequence[tuple[float, float]],
        reducer: str,
        scale: float,
    ) -> list[dict[str, float | None]]:
        if not points:
            return []
        features = [
            ee.Feature(ee.Geometry.Point([lon, lat]), {POINT_ID_PROPERTY: i})
            for i, (lon, lat) in enumerate(points)
        ]
        reduced = raster.reduceRegions(
            collection=ee.FeatureCollection(features),
            reducer=_single_reducer(reducer),
            scale=scale,
        )
        band_names: list[str] = self._get_info(raster.bandNames())
        info = self._get_info(reduced.sort(POINT_ID_PROPERTY))

        by_id: dict[int, dict[str, Any]] = {}
        for feature in info.get("features", []):
            props = feature.get("properties", {})
            if POINT_ID_PROPERTY in props:
                by_id[int(props[POINT_ID_PROPERTY])] = props

        if len(by_id) != len(points):
            msg = f"reduceRegions returned {len(by_id)} features for {len(points)} points"
            raise ExternalServiceError(msg, service=self.name)

        return [
            {band: _as_float(by_id[i].get(band)) for band in band_names} for i in range(len(points))
        ]

    def histogram(
        self,
        raster: Any,
        region: Region,
        band: str,
        max_buckets: int,
        scale: float,
        max_pixels: int,
    ) -> list[tuple[float, float, float]]:
        stats = raster.select(band).reduceRegion(
            reducer=ee.Reducer.histogram(maxBuckets=max_buckets),
            geometry=_ee_geometry(region),
            scale=scale,
            maxPixels=max_pixels,
        )
        info = self._get_info(stats)
        if not isinstance(info, dict):
            msg = f"reduceRegion returned {type(info).__name__}, expected a dictionary"
            raise ExternalServiceError(msg, service=self.name)

        # {"bucketMin", "bucketWidth", "histogram": [counts], ...}, or null without pixels
        result = info.get(band)
        if result is None:
            return []
        if not isinstance(result, dict) or not isinstance(result.get("histogram"), list):
            msg = f"Malformed histogram for band {band!r}: {result!r}"
            raise ExternalServiceError(msg, service=self.name)
        bucket_min = _as_float(result.get("bucketMin"))
        bucket_width = _as_float(result.get("bucketWidth"))
        if bucket_min is None or bucket_width is None:
            msg = f"Histogram for band {band!r} lacks bucketMin/bucketWidth"
            raise ExternalServiceError(msg, service=self.name)

        buckets: list[tuple[float, float, float]] = []
        for i, value in enumerate(result["histogram"]):
            count = _as_float(value)
            lower = bucket_min + i * bucket_width
            buckets.append((lower, lower + bucket_width, 0.0 if count is None else count))
        return buckets

    def random_points(self, region: Region, count: int, seed: int) -> list[tuple[float, float]]:
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            msg = f"count must be a positive integer, got {count!r}"
            raise ConfigurationError(msg)
        fc = ee.FeatureCollection.randomPoints(region=_ee_geometry(region), points=count, seed=seed)
        info = self._get_info(fc)
        coords: list[tuple[float, float]] = []
        for feature in info.get("features", []):
            lon, lat = feature["geometry"]["coordinates"][:2]
            coords.append((float(lon), float(lat)))
        return coords

    def _get_info(self, obj: Any) -> Any:
        try:
            return obj.getInfo()
        except ee.EEException as exc:
            raise ExternalServiceError(str(exc), service=self.name) from exc


def _ee_geometry(region: Region) -> Any:
    return ee.Geometry(region.to_geojson())


def _single_reducer(reducer: str) -> Any:
    if reducer == REDUCER_MEAN:
        return ee.Reducer.mean()
    if reducer == REDUCER_STD_DEV:
        return ee.Reducer.stdDev()
    pct = percentile_of(reducer)
    if pct is not None:
        return ee.Reducer.percentile([pct])
    msg = f"Unsupported reducer: {reducer!r}"
    raise ConfigurationError(msg)


def _combined_reducer(reducers: Sequence[str]) -> Any:
    """Chain reducers with shared inputs; outputs are named ``<band>_<reducer>``."""
    if not reducers:
        msg = "At least one reducer is required"
        raise ConfigurationError(msg)
    combined = _single_reducer(reducers[0])
    for name in reducers[1:]:
        combined = combined.combine(_single_reducer(name), "", True)
    return combined


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"Expected a number from Earth Engine, got {value!r}"
        raise ExternalServiceError(msg, service=SERVICE_NAME)
    return float(value)
