"""Wind speed map-layer stretch and palette (m/s)."""

WIND_SPEED_MIN: float = 0.3750263580093698
WIND_SPEED_MAX: float = 8.113219716238905

WIND_SPEED_PALETTE: list[str] = [
    "#0e0e0e",
    "#281dc8",
    "#38913b",
    "#5af7ff",
    "#10ff22",
    "#f5ff62",
    "#ff640a",
]

# Bucket cap for the wind speed distribution chart
HISTOGRAM_MAX_BUCKETS: int = 30
