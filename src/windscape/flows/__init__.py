"""
Prefect flows for the analysis pipeline.

Flows:
- analyze: Compute monthly statistics, correlation samples and legend bins
- export: Write the stored tables as CSV files

Usage (local):
    python -m windscape.flows.analyze
    python -m windscape.flows.export

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'analyze-region/default'

Earth Engine needs credentials first (``earthengine authenticate``); set
``WINDSCAPE_BACKEND=local`` to run over pre-downloaded .npz grids instead.
"""
