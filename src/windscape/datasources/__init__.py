"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants (HTTP sources)
    ├── models.py         # Dataclasses for responses (optional)
    └── {feature}.py      # Fetch/query functions

Current sources:
  - raster/      Raster Data Service (Earth Engine, in-memory numpy grids)
  - boundaries/  Country boundaries from the geoBoundaries API

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with files above.
2. HTTP sources go through ``windscape.services.http.get_json`` so that
   retries are uniform and failures surface as ``ExternalServiceError``.
3. Re-export public API in ``__init__.py`` with ``__all__``.
4. Wire into ``flows/analyze.py`` and add tests in ``tests/test_{name}.py``.
"""
