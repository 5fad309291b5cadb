"""Wind/terrain observation pairs at sampled points.

The variable raster (a temporal mean of the wind band) and the terrain raster
are stacked into one multi-band source and sampled with a single multi-point
reduction, so both bands are read at the same scale.
"""

from __future__ import annotations

import math
import statistics
from typing import TYPE_CHECKING, Any

from windscape.analysis.models import CorrelationSummary, ObservationPair, SampledPoint
from windscape.datasources.raster.service import REDUCER_MEAN
from windscape.errors import ConfigurationError, ExternalServiceError
from windscape.reference.datasets import DEFAULT_SCALE_M

if TYPE_CHECKING:
    from collections.abc import Sequence

    from windscape.datasources.raster.service import RasterDataService


def extract_observations(
    points: Sequence[SampledPoint],
    variable_raster: Any,
    terrain_raster: Any,
    *,
    service: RasterDataService,
    variable_band: str,
    terrain_band: str,
    scale: float = DEFAULT_SCALE_M,
) -> list[ObservationPair]:
    """Read both bands at every point.

    Output order and length match ``points``. A point on no-data gets ``None``
    for that band but is never dropped.

    Raises:
        ConfigurationError: Non-positive scale or identical band names.
        ExternalServiceError: Service failure or a response of the wrong length.
    """
    if not scale > 0:
        msg = f"scale must be positive, got {scale!r}"
        raise ConfigurationError(msg)
    if variable_band == terrain_band:
        msg = f"variable and terrain bands must differ, both are {variable_band!r}"
        raise ConfigurationError(msg)
    if not points:
        return []

    stacked = service.stack_bands([variable_raster, terrain_raster])
    rows = service.region_reduce_multi_point(
        stacked, [p.location for p in points], REDUCER_MEAN, scale
    )
    if len(rows) != len(points):
        msg = f"Point extraction returned {len(rows)} rows for {len(points)} points"
        raise ExternalServiceError(msg, service=service.name)

    return [
        ObservationPair(
            point=point,
            variable_value=_clean(row.get(variable_band), variable_band, service.name),
            terrain_value=_clean(row.get(terrain_band), terrain_band, service.name),
        )
        for point, row in zip(points, rows, strict=True)
    ]


def summarize_correlation(pairs: Sequence[ObservationPair]) -> CorrelationSummary:
    """Least-squares trendline of variable vs terrain over complete pairs.

    Returns a summary with ``None`` slope/intercept/R² when fewer than two
    complete pairs exist or terrain values are constant.
    """
    complete = [p for p in pairs if p.is_complete]
    n = len(complete)
    if n < 2:
        return CorrelationSummary(n=n)

    xs = [p.terrain_value for p in complete]
    ys = [p.variable_value for p in complete]
    if len(set(xs)) < 2:
        return CorrelationSummary(n=n)

    slope, intercept = statistics.linear_regression(xs, ys)
    r_squared = statistics.correlation(xs, ys) ** 2 if len(set(ys)) > 1 else 0.0
    return CorrelationSummary(n=n, slope=slope, intercept=intercept, r_squared=r_squared)


def _clean(value: Any, band: str, service_name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"Non-numeric {band} value from point extraction: {value!r}"
        raise ExternalServiceError(msg, service=service_name)
    value = float(value)
    return None if math.isnan(value) else value
