"""Windscape - regional wind-speed climatology and terrain correlation.

Architecture::

    reference/     Static constants (dataset ids, default palette, Region geometry)
    datasources/   External collaborators (raster service backends, boundary API)
    analysis/      Core pipeline (cohort clock, cohort stats, sampling, correlation, legend)
    tables.py      Records -> output table rows (monthly stats, correlation, legend)
    store.py       JSON envelopes with TTL + CSV table export
    flows/         Prefect orchestration (analyze computes tables, export writes CSV)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources -> analysis -> tables -> store -> exports/

Extension points - see each package's docstring for step-by-step guides:
  - New raster backend:  datasources/raster/__init__.py
  - New analysis:        analysis/__init__.py
"""

__version__ = "0.1.0"

from windscape.config import Settings
from windscape.errors import ConfigurationError, ExternalServiceError, WindscapeError

__all__ = [
    "ConfigurationError",
    "ExternalServiceError",
    "Settings",
    "WindscapeError",
    "__version__",
]
