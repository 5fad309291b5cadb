"""Tests for the Region geometry wrapper."""

from __future__ import annotations

import json

import pytest
from shapely.geometry import MultiPolygon

from windscape.errors import ConfigurationError
from windscape.reference.geography import Region

SQUARE = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]]}
SQUARE_EAST = {"type": "Polygon", "coordinates": [[[5, 0], [6, 0], [6, 1], [5, 1], [5, 0]]]}


class TestFromGeoJSON:
    """Test parsing GeoJSON inputs."""

    def test_bare_geometry(self) -> None:
        region = Region.from_geojson(SQUARE, name="square")
        assert region.name == "square"
        assert region.bounds == (0.0, 0.0, 1.0, 1.0)

    def test_feature(self) -> None:
        region = Region.from_geojson({"type": "Feature", "properties": {}, "geometry": SQUARE})
        assert region.geometry.area == pytest.approx(1.0)

    def test_feature_collection_dissolved(self) -> None:
        fc = {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "properties": {"shapeName": "a"}, "geometry": SQUARE},
                {"type": "Feature", "properties": {"shapeName": "b"}, "geometry": SQUARE_EAST},
            ],
        }
        region = Region.from_geojson(fc, name="Sudan")
        assert isinstance(region.geometry, MultiPolygon)
        assert region.bounds == (0.0, 0.0, 6.0, 1.0)

    def test_empty_feature_collection(self) -> None:
        with pytest.raises(ConfigurationError, match="empty"):
            Region.from_geojson({"type": "FeatureCollection", "features": []})

    def test_point_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Polygon or MultiPolygon"):
            Region.from_geojson({"type": "Point", "coordinates": [30.0, 15.0]})

    def test_bowtie_rejected(self) -> None:
        bowtie = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]}
        with pytest.raises(ConfigurationError, match="invalid"):
            Region.from_geojson(bowtie)

    def test_malformed(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot parse"):
            Region.from_geojson({"type": "Polygon"})


class TestFromBounds:
    """Test rectangular regions."""

    def test_box(self) -> None:
        region = Region.from_bounds(22.0, 9.0, 38.0, 22.0)
        assert region.bounds == (22.0, 9.0, 38.0, 22.0)

    @pytest.mark.parametrize("bounds", [(1.0, 0.0, 1.0, 1.0), (0.0, 2.0, 1.0, 1.0)])
    def test_degenerate(self, bounds: tuple[float, float, float, float]) -> None:
        with pytest.raises(ConfigurationError, match="degenerate"):
            Region.from_bounds(*bounds)


class TestToGeoJSON:
    """Test serialization back to GeoJSON."""

    def test_json_serializable(self) -> None:
        geojson = Region.from_geojson(SQUARE).to_geojson()
        assert geojson["type"] == "Polygon"
        assert isinstance(geojson["coordinates"][0], list)
        assert json.loads(json.dumps(geojson)) == geojson

    def test_round_trip_area(self) -> None:
        region = Region.from_bounds(0.0, 0.0, 2.0, 3.0)
        again = Region.from_geojson(region.to_geojson())
        assert again.geometry.equals(region.geometry)
