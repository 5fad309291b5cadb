"""Tests for the Earth Engine backend (``ee`` is mocked throughout)."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from windscape.datasources.raster import REGION_STAT_REDUCERS, create_service
from windscape.datasources.raster.earthengine import EarthEngineRasterService
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.reference.geography import Region


class FakeEEException(Exception):
    pass


@pytest.fixture
def mock_ee() -> Iterator[MagicMock]:
    with patch("windscape.datasources.raster.earthengine.ee") as ee_module:
        ee_module.EEException = FakeEEException
        yield ee_module


@pytest.fixture
def region() -> Region:
    return Region.from_bounds(22.0, 9.0, 38.0, 22.0, name="Sudan")


class TestInitialize:
    """Test client initialization."""

    def test_with_project(self, mock_ee: MagicMock) -> None:
        EarthEngineRasterService(project="my-project")
        mock_ee.Initialize.assert_called_once_with(project="my-project")

    def test_default_project(self, mock_ee: MagicMock) -> None:
        EarthEngineRasterService()
        mock_ee.Initialize.assert_called_once_with()

    def test_skip_initialize(self, mock_ee: MagicMock) -> None:
        EarthEngineRasterService(initialize=False)
        mock_ee.Initialize.assert_not_called()

    def test_failure(self, mock_ee: MagicMock) -> None:
        mock_ee.Initialize.side_effect = Exception("no credentials")
        with pytest.raises(ExternalServiceError, match="earthengine authenticate"):
            EarthEngineRasterService()

    def test_create_service(self, mock_ee: MagicMock) -> None:
        service = create_service("earthengine", project="p")
        assert isinstance(service, EarthEngineRasterService)
        assert service.name == "earthengine"

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown raster backend"):
            create_service("gdal")


class TestQueryTimeSeries:
    """Test collection filtering."""

    def test_filter_dates_end_exclusive(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        collection = mock_ee.ImageCollection.return_value
        selected = collection.filterBounds.return_value.filterDate.return_value.select.return_value
        selected.size.return_value.getInfo.return_value = 0

        frames = service.query_time_series(
            "NASA/FLDAS/NOAH01/C/GL/M/V001",
            "Wind_f_tavg",
            region,
            (date(2006, 1, 1), date(2006, 1, 31)),
        )

        assert frames == []
        mock_ee.ImageCollection.assert_called_once_with("NASA/FLDAS/NOAH01/C/GL/M/V001")
        collection.filterBounds.return_value.filterDate.assert_called_once_with(
            "2006-01-01", "2006-02-01"
        )
        collection.filterBounds.return_value.filterDate.return_value.select.assert_called_once_with(
            "Wind_f_tavg"
        )

    def test_returns_clipped_images(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        selected = (
            mock_ee.ImageCollection.return_value.filterBounds.return_value.filterDate.return_value
        ).select.return_value
        selected.size.return_value.getInfo.return_value = 2

        frames = service.query_time_series(
            "fldas", "Wind_f_tavg", region, (date(2006, 1, 1), date(2006, 1, 31))
        )

        assert len(frames) == 2
        selected.toList.assert_called_once_with(2)
        assert mock_ee.Image.return_value.clip.call_count == 2

    def test_ee_error(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        selected = (
            mock_ee.ImageCollection.return_value.filterBounds.return_value.filterDate.return_value
        ).select.return_value
        selected.size.return_value.getInfo.side_effect = FakeEEException("Collection not found")

        with pytest.raises(ExternalServiceError, match="Collection not found"):
            service.query_time_series(
                "missing", "b", region, (date(2006, 1, 1), date(2006, 1, 31))
            )


class TestRegionReduce:
    """Test combined reductions."""

    def test_combined_reducer(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.reduceRegion.return_value.getInfo.return_value = {
            "Wind_f_tavg_mean": 3,
            "Wind_f_tavg_stdDev": 0.5,
            "Wind_f_tavg_p10": 2.1,
            "Wind_f_tavg_p90": None,
        }

        result = service.region_reduce(raster, region, REGION_STAT_REDUCERS, 11_000, 10**9)

        assert result == {
            "Wind_f_tavg_mean": 3.0,
            "Wind_f_tavg_stdDev": 0.5,
            "Wind_f_tavg_p10": 2.1,
            "Wind_f_tavg_p90": None,
        }
        mock_ee.Reducer.percentile.assert_any_call([10])
        mock_ee.Reducer.percentile.assert_any_call([90])
        mean = mock_ee.Reducer.mean.return_value
        mean.combine.assert_called_once_with(mock_ee.Reducer.stdDev.return_value, "", True)
        kwargs = raster.reduceRegion.call_args.kwargs
        assert kwargs["scale"] == 11_000
        assert kwargs["maxPixels"] == 10**9

    def test_non_numeric(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.reduceRegion.return_value.getInfo.return_value = {"Wind_f_tavg_mean": "n/a"}
        with pytest.raises(ExternalServiceError, match="Expected a number"):
            service.region_reduce(raster, region, ["mean"], 11_000, 10**9)

    def test_not_a_dict(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.reduceRegion.return_value.getInfo.return_value = [1, 2]
        with pytest.raises(ExternalServiceError, match="expected a dictionary"):
            service.region_reduce(raster, region, ["mean"], 11_000, 10**9)

    def test_unsupported_reducer(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        with pytest.raises(ConfigurationError, match="Unsupported"):
            service.region_reduce(MagicMock(), region, ["median"], 11_000, 10**9)


class TestHistogram:
    """Test the bucketed histogram reduction."""

    def test_buckets(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        selected = raster.select.return_value
        selected.reduceRegion.return_value.getInfo.return_value = {
            "Wind_f_tavg": {
                "bucketMin": 2.0,
                "bucketWidth": 0.5,
                "bucketMeans": [2.25, 2.75, 3.25],
                "histogram": [4, 10.5, 0],
            }
        }

        buckets = service.histogram(raster, region, "Wind_f_tavg", 30, 11_000, 10**9)

        assert buckets == [(2.0, 2.5, 4.0), (2.5, 3.0, 10.5), (3.0, 3.5, 0.0)]
        raster.select.assert_called_once_with("Wind_f_tavg")
        mock_ee.Reducer.histogram.assert_called_once_with(maxBuckets=30)
        kwargs = selected.reduceRegion.call_args.kwargs
        assert kwargs["reducer"] is mock_ee.Reducer.histogram.return_value
        assert kwargs["scale"] == 11_000
        assert kwargs["maxPixels"] == 10**9

    def test_no_pixels(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.select.return_value.reduceRegion.return_value.getInfo.return_value = {
            "Wind_f_tavg": None
        }
        assert service.histogram(raster, region, "Wind_f_tavg", 30, 11_000, 10**9) == []

    def test_malformed(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.select.return_value.reduceRegion.return_value.getInfo.return_value = {
            "Wind_f_tavg": {"bucketMin": 2.0, "histogram": [1, 2]}
        }
        with pytest.raises(ExternalServiceError, match="bucketWidth"):
            service.histogram(raster, region, "Wind_f_tavg", 30, 11_000, 10**9)

    def test_ee_error(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        reduced = raster.select.return_value.reduceRegion.return_value
        reduced.getInfo.side_effect = FakeEEException("User memory limit exceeded")
        with pytest.raises(ExternalServiceError, match="memory limit"):
            service.histogram(raster, region, "Wind_f_tavg", 30, 11_000, 10**9)


class TestPoints:
    """Test random points and per-point extraction."""

    def test_random_points(self, mock_ee: MagicMock, region: Region) -> None:
        service = EarthEngineRasterService(initialize=False)
        mock_ee.FeatureCollection.randomPoints.return_value.getInfo.return_value = {
            "features": [
                {"geometry": {"type": "Point", "coordinates": [30.5, 14.0]}},
                {"geometry": {"type": "Point", "coordinates": [25.25, 12.5]}},
            ]
        }

        points = service.random_points(region, 2, 123)

        assert points == [(30.5, 14.0), (25.25, 12.5)]
        kwargs = mock_ee.FeatureCollection.randomPoints.call_args.kwargs
        assert kwargs["points"] == 2
        assert kwargs["seed"] == 123

    def test_multi_point_sorted_by_id(self, mock_ee: MagicMock) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.bandNames.return_value.getInfo.return_value = ["Wind_f_tavg", "elevation"]
        raster.reduceRegions.return_value.sort.return_value.getInfo.return_value = {
            "features": [
                {"properties": {"point_id": 1, "Wind_f_tavg": 4.0, "elevation": 510}},
                {"properties": {"point_id": 0, "Wind_f_tavg": 3.5}},
            ]
        }

        points = [(30.0, 14.0), (31.0, 15.0)]
        rows = service.region_reduce_multi_point(raster, points, "mean", 11_000)

        assert rows == [
            {"Wind_f_tavg": 3.5, "elevation": None},
            {"Wind_f_tavg": 4.0, "elevation": 510.0},
        ]
        raster.reduceRegions.return_value.sort.assert_called_once_with("point_id")

    def test_multi_point_missing_feature(self, mock_ee: MagicMock) -> None:
        service = EarthEngineRasterService(initialize=False)
        raster = MagicMock()
        raster.bandNames.return_value.getInfo.return_value = ["Wind_f_tavg"]
        raster.reduceRegions.return_value.sort.return_value.getInfo.return_value = {
            "features": [{"properties": {"point_id": 0, "Wind_f_tavg": 3.5}}]
        }
        with pytest.raises(ExternalServiceError, match="1 features for 2 points"):
            service.region_reduce_multi_point(raster, [(30.0, 14.0), (31.0, 15.0)], "mean", 11_000)
