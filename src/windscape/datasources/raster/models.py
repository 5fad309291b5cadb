"""In-memory raster models.

A ``RasterFrame`` is a set of named 2-D float bands sharing one regular
lon/lat grid. NaN marks no-data.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from datetime import date

# Mean length of one degree of latitude, used to turn a reduction scale in
# meters into a pixel count.
METERS_PER_DEGREE = 111_320.0


@dataclass(frozen=True)
class GridSpec:
    """Regular north-up lon/lat grid anchored at its NW corner."""

    west: float
    north: float
    pixel_size: float
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.pixel_size <= 0 or self.width <= 0 or self.height <= 0:
            msg = f"Invalid grid: pixel_size={self.pixel_size}, shape=({self.height}, {self.width})"
            raise ValueError(msg)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    @property
    def east(self) -> float:
        return self.west + self.pixel_size * self.width

    @property
    def south(self) -> float:
        return self.north - self.pixel_size * self.height

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (self.west, self.south, self.east, self.north)

    def cell_centers(self) -> tuple[np.ndarray, np.ndarray]:
        """2-D (lon, lat) arrays of pixel centers."""
        lons = self.west + (np.arange(self.width) + 0.5) * self.pixel_size
        lats = self.north - (np.arange(self.height) + 0.5) * self.pixel_size
        return np.meshgrid(lons, lats)

    def index_of(self, lon: float, lat: float) -> tuple[int, int] | None:
        """(row, col) of the pixel containing the point, or None if outside."""
        col = math.floor((lon - self.west) / self.pixel_size)
        row = math.floor((self.north - lat) / self.pixel_size)
        if 0 <= row < self.height and 0 <= col < self.width:
            return row, col
        return None

    def scale_in_pixels(self, scale_m: float) -> float:
        return scale_m / (self.pixel_size * METERS_PER_DEGREE)

    def matches(self, other: GridSpec) -> bool:
        return (
            self.shape == other.shape
            and math.isclose(self.west, other.west)
            and math.isclose(self.north, other.north)
            and math.isclose(self.pixel_size, other.pixel_size)
        )


@dataclass(frozen=True, eq=False)
class RasterFrame:
    """Named bands on one grid, optionally tagged with a timestamp."""

    grid: GridSpec
    bands: dict[str, np.ndarray] = field(default_factory=dict)
    timestamp: date | None = None

    def __post_init__(self) -> None:
        for name, arr in self.bands.items():
            if arr.shape != self.grid.shape:
                msg = f"Band {name!r} has shape {arr.shape}, grid expects {self.grid.shape}"
                raise ValueError(msg)

    @classmethod
    def single(
        cls, grid: GridSpec, band: str, values: np.ndarray, timestamp: date | None = None
    ) -> RasterFrame:
        return cls(grid=grid, bands={band: np.asarray(values, dtype=float)}, timestamp=timestamp)

    @property
    def band_names(self) -> list[str]:
        return list(self.bands)

    def select(self, band: str) -> RasterFrame:
        """Single-band view of this frame."""
        return RasterFrame(grid=self.grid, bands={band: self.bands[band]}, timestamp=self.timestamp)
