"""Dataset identifiers and reduction defaults."""

# FLDAS Noah land surface model, monthly, 0.1 deg global
WIND_DATASET: str = "NASA/FLDAS/NOAH01/C/GL/M/V001"
WIND_BAND: str = "Wind_f_tavg"

# SRTM 1 arc-second DEM
TERRAIN_DATASET: str = "USGS/SRTMGL1_003"
TERRAIN_BAND: str = "elevation"

# First year with FLDAS monthly coverage.
EARLIEST_YEAR: int = 1982

# Nominal reduction scale in meters (roughly the FLDAS 0.1 deg pixel).
DEFAULT_SCALE_M: float = 11_000
DEFAULT_MAX_PIXELS: int = 1_000_000_000

DEFAULT_SAMPLE_COUNT: int = 500
DEFAULT_SAMPLE_SEED: int = 123
