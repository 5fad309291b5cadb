"""Raster Data Service contract.

The core never touches pixels directly. It asks a service to query frames,
average them, and reduce them over a region or a set of points. Frames are
opaque to the core: an ``ee.Image`` for Earth Engine, a ``RasterFrame`` for the
in-memory backend.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from windscape.reference.geography import Region

# Reducer identifiers, named after Earth Engine's output names
REDUCER_MEAN = "mean"
REDUCER_STD_DEV = "stdDev"
REDUCER_P10 = "p10"
REDUCER_P90 = "p90"

#: The joint reducer applied to each cohort's mean raster.
REGION_STAT_REDUCERS: tuple[str, ...] = (REDUCER_MEAN, REDUCER_STD_DEV, REDUCER_P10, REDUCER_P90)

_PERCENTILE_RE = re.compile(r"^p(\d{1,2}|100)$")


def output_key(band: str, reducer: str) -> str:
    """Key of a combined-reducer output, e.g. ``Wind_f_tavg_stdDev``."""
    return f"{band}_{reducer}"


def percentile_of(reducer: str) -> int | None:
    """Return N for a ``pN`` reducer id, else None."""
    m = _PERCENTILE_RE.match(reducer)
    return int(m.group(1)) if m else None


class RasterDataService(Protocol):
    """Protocol implemented by every raster backend."""

    name: str

    def query_time_series(
        self,
        dataset_id: str,
        band: str,
        region: Region,
        date_range: tuple[date, date],
    ) -> Sequence[Any]:
        """Frames of ``dataset_id``/``band`` overlapping ``region`` with a
        timestamp inside ``date_range`` (both ends inclusive)."""
        ...

    def load_image(self, dataset_id: str, band: str, region: Region) -> Any:
        """A static (time-less) single-band raster, e.g. a DEM."""
        ...

    def temporal_mean(self, frames: Sequence[Any]) -> Any:
        """Per-pixel mean across frames; cells with no valid input stay no-data."""
        ...

    def stack_bands(self, rasters: Sequence[Any]) -> Any:
        """Combine single-band rasters into one multi-band raster."""
        ...

    def region_reduce(
        self,
        raster: Any,
        region: Region,
        reducers: Sequence[str],
        scale: float,
        max_pixels: int,
    ) -> dict[str, float | None]:
        """Reduce every band over ``region``; keys are ``<band>_<reducer>``."""
        ...

    def region_reduce_multi_point(
        self,
        raster: Any,
        points: Sequence[tuple[float, float]],
        reducer: str,
        scale: float,
    ) -> list[dict[str, float | None]]:
        """One ``{band: value}`` mapping per (lon, lat) point, in input order."""
        ...

    def histogram(
        self,
        raster: Any,
        region: Region,
        band: str,
        max_buckets: int,
        scale: float,
        max_pixels: int,
    ) -> list[tuple[float, float, float]]:
        """Frequency of ``band`` values over ``region`` in at most ``max_buckets``
        equal-width buckets, as ascending ``(lower, upper, count)`` tuples.

        Empty when the region holds no valid pixels.
        """
        ...

    def random_points(self, region: Region, count: int, seed: int) -> list[tuple[float, float]]:
        """``count`` reproducible (lon, lat) points inside ``region``."""
        ...
