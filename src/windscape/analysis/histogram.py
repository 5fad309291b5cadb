"""Distribution of the mean wind raster over a region.

Buckets are equal-width and ascending; the service picks the edges, capped at
``max_buckets`` buckets.
"""

from __future__ import annotations

import math
from itertools import pairwise
from typing import TYPE_CHECKING, Any

from windscape.analysis.models import HistogramBucket
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.reference.datasets import DEFAULT_MAX_PIXELS, DEFAULT_SCALE_M
from windscape.reference.geography import Region
from windscape.reference.visualization import HISTOGRAM_MAX_BUCKETS

if TYPE_CHECKING:
    from windscape.datasources.raster.service import RasterDataService


def build_histogram(
    raster: Any,
    region: Region,
    *,
    service: RasterDataService,
    band: str,
    scale: float = DEFAULT_SCALE_M,
    max_pixels: int = DEFAULT_MAX_PIXELS,
    max_buckets: int = HISTOGRAM_MAX_BUCKETS,
) -> list[HistogramBucket]:
    """Pixel frequencies of ``band`` over ``region``.

    Args:
        raster: Source raster (typically the temporal mean of the wind band).
        region: Reduction geometry.
        service: Raster service that owns ``raster``.
        band: Band to bucket.
        scale: Nominal reduction scale in meters.
        max_pixels: Upper bound on pixels in the reduction.
        max_buckets: Most buckets the service may return.

    Returns:
        Buckets in ascending order; empty when the region has no valid pixels.

    Raises:
        ConfigurationError: Invalid inputs; raised before any service call.
        ExternalServiceError: Service failure or malformed buckets.
    """
    if not isinstance(region, Region):
        msg = f"region must be a Region, got {type(region).__name__}"
        raise ConfigurationError(msg)
    if not scale > 0:
        msg = f"scale must be positive, got {scale!r}"
        raise ConfigurationError(msg)
    if isinstance(max_pixels, bool) or not isinstance(max_pixels, int) or max_pixels <= 0:
        msg = f"max_pixels must be a positive integer, got {max_pixels!r}"
        raise ConfigurationError(msg)
    if isinstance(max_buckets, bool) or not isinstance(max_buckets, int) or max_buckets <= 0:
        msg = f"max_buckets must be a positive integer, got {max_buckets!r}"
        raise ConfigurationError(msg)

    raw = service.histogram(raster, region, band, max_buckets, scale, max_pixels)
    if len(raw) > max_buckets:
        msg = f"Histogram returned {len(raw)} buckets, at most {max_buckets} allowed"
        raise ExternalServiceError(msg, service=service.name)

    buckets = [HistogramBucket(*_check_bucket(entry, service.name)) for entry in raw]
    for previous, current in pairwise(buckets):
        if current.lower_bound < previous.upper_bound and not math.isclose(
            current.lower_bound, previous.upper_bound
        ):
            msg = f"Histogram buckets overlap at {current.lower_bound!r}"
            raise ExternalServiceError(msg, service=service.name)
    return buckets


def _check_bucket(entry: Any, service_name: str) -> tuple[float, float, float]:
    try:
        lower, upper, count = entry
    except (TypeError, ValueError) as exc:
        msg = f"Malformed histogram bucket: {entry!r}, expected (lower, upper, count)"
        raise ExternalServiceError(msg, service=service_name) from exc

    for value in (lower, upper, count):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            msg = f"Non-numeric histogram bucket: {entry!r}"
            raise ExternalServiceError(msg, service=service_name)
    if not upper > lower or count < 0:
        msg = f"Invalid histogram bucket: {entry!r}"
        raise ExternalServiceError(msg, service=service_name)
    return float(lower), float(upper), float(count)
