"""Region geometry for reductions and point sampling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import shapely
from shapely.errors import ShapelyError
from shapely.geometry import MultiPolygon, Polygon, box, mapping, shape
from shapely.geometry.base import BaseGeometry

from windscape.errors import ConfigurationError

_AREAL_TYPES = (Polygon, MultiPolygon)


@dataclass(frozen=True)
class Region:
    """A named lon/lat (EPSG:4326) polygon or multipolygon.

    Construction fails with ``ConfigurationError`` if the geometry is empty,
    not areal, or invalid. Every downstream reduction and sampling call can
    therefore assume a usable geometry.
    """

    name: str
    geometry: BaseGeometry

    def __post_init__(self) -> None:
        geom = self.geometry
        if geom is None or geom.is_empty:
            msg = f"Region {self.name!r} has an empty geometry"
            raise ConfigurationError(msg)
        if not isinstance(geom, _AREAL_TYPES):
            msg = f"Region {self.name!r} must be a Polygon or MultiPolygon, got {geom.geom_type}"
            raise ConfigurationError(msg)
        if not geom.is_valid:
            reason = shapely.is_valid_reason(geom)
            msg = f"Region {self.name!r} has an invalid geometry: {reason}"
            raise ConfigurationError(msg)
        if geom.area == 0:
            msg = f"Region {self.name!r} has zero area"
            raise ConfigurationError(msg)

    @classmethod
    def from_geojson(cls, data: dict[str, Any], name: str = "region") -> Region:
        """Build a Region from a GeoJSON geometry, Feature, or FeatureCollection.

        FeatureCollections are dissolved into a single (multi)polygon.
        """
        kind = data.get("type") if isinstance(data, dict) else None
        try:
            if kind == "FeatureCollection":
                features = data.get("features", [])
                parts = [shape(f["geometry"]) for f in features if f.get("geometry")]
                geom = shapely.unary_union(parts) if parts else Polygon()
            elif kind == "Feature":
                geom = shape(data["geometry"]) if data.get("geometry") else Polygon()
            else:
                geom = shape(data)
        except (AttributeError, KeyError, TypeError, ValueError, ShapelyError) as exc:
            msg = f"Region {name!r}: cannot parse GeoJSON ({exc})"
            raise ConfigurationError(msg) from exc
        return cls(name=name, geometry=geom)

    @classmethod
    def from_bounds(
        cls, west: float, south: float, east: float, north: float, name: str = "region"
    ) -> Region:
        """Build a rectangular Region from lon/lat bounds."""
        if west >= east or south >= north:
            msg = f"Region {name!r}: degenerate bounds ({west}, {south}, {east}, {north})"
            raise ConfigurationError(msg)
        return cls(name=name, geometry=box(west, south, east, north))

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(west, south, east, north)."""
        west, south, east, north = self.geometry.bounds
        return (west, south, east, north)

    def to_geojson(self) -> dict[str, Any]:
        """GeoJSON geometry mapping (plain dicts/lists, JSON-serializable)."""
        return _plain(mapping(self.geometry))


def _plain(obj: Any) -> Any:
    """Convert shapely's tuple-based mapping into JSON-style lists."""
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    return obj
