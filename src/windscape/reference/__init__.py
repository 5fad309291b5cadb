"""Static reference data.

Constants that don't change with API calls: dataset identifiers and bands,
reduction defaults, the default wind-speed palette, and the Region geometry
wrapper.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from windscape.reference.datasets import DEFAULT_MAX_PIXELS as DEFAULT_MAX_PIXELS
from windscape.reference.datasets import DEFAULT_SCALE_M as DEFAULT_SCALE_M
from windscape.reference.datasets import EARLIEST_YEAR as EARLIEST_YEAR
from windscape.reference.datasets import TERRAIN_BAND as TERRAIN_BAND
from windscape.reference.datasets import TERRAIN_DATASET as TERRAIN_DATASET
from windscape.reference.datasets import WIND_BAND as WIND_BAND
from windscape.reference.datasets import WIND_DATASET as WIND_DATASET
from windscape.reference.geography import Region as Region
from windscape.reference.visualization import WIND_SPEED_MAX as WIND_SPEED_MAX
from windscape.reference.visualization import WIND_SPEED_MIN as WIND_SPEED_MIN
from windscape.reference.visualization import WIND_SPEED_PALETTE as WIND_SPEED_PALETTE
