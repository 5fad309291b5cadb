"""Exception hierarchy.

Two failure kinds leave the core:

- ``ConfigurationError``: bad inputs detected before any external call
  (time range, sample count, legend range/palette, region geometry, scale).
- ``ExternalServiceError``: the raster service or boundary API was unreachable
  or answered with something we cannot interpret.

Missing data is *not* an error. Empty cohorts and no-data sample points come
back as ``None`` fields on otherwise normal records.
"""

from __future__ import annotations


class WindscapeError(Exception):
    """Base class for all windscape errors."""


class ConfigurationError(WindscapeError, ValueError):
    """Invalid configuration or arguments."""


class ExternalServiceError(WindscapeError, RuntimeError):
    """The raster service or an HTTP API failed or returned a malformed response."""

    def __init__(self, message: str, *, service: str | None = None) -> None:
        super().__init__(message)
        self.service = service

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.service}] {base}" if self.service else base
