"""Reproducible random sample points inside a region."""

from __future__ import annotations

from typing import TYPE_CHECKING

from windscape.analysis.models import SampledPoint
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.reference.geography import Region

if TYPE_CHECKING:
    from windscape.datasources.raster.service import RasterDataService


def check_sample_count(count: int) -> int:
    """Return ``count`` if it is a positive integer, else raise ConfigurationError."""
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        msg = f"Sample count must be a positive integer, got {count!r}"
        raise ConfigurationError(msg)
    return count


def sample_points(
    service: RasterDataService, region: Region, count: int, seed: int
) -> list[SampledPoint]:
    """Draw ``count`` points uniformly inside ``region``.

    The same ``(region, count, seed)`` always yields the same ordered points;
    the seed is passed explicitly to the service's generator and no global
    random state is involved.

    Args:
        service: Raster service providing the seeded point generator.
        region: Sampling geometry.
        count: Number of points (positive).
        seed: Generator seed.

    Returns:
        Points with ``id`` 0..count-1 in draw order.

    Raises:
        ConfigurationError: Non-positive count or invalid region.
        ExternalServiceError: The service returned the wrong number of points.
    """
    check_sample_count(count)
    if not isinstance(region, Region):
        msg = f"region must be a Region, got {type(region).__name__}"
        raise ConfigurationError(msg)

    coords = service.random_points(region, count, seed)
    if len(coords) != count:
        msg = f"Requested {count} random points, service returned {len(coords)}"
        raise ExternalServiceError(msg, service=service.name)

    return [SampledPoint(id=i, lon=lon, lat=lat) for i, (lon, lat) in enumerate(coords)]
