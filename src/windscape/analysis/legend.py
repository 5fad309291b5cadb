"""Equal-width legend bins from a value range and a palette.

    step  = (max - min) / (len(palette) - 1)
    bin i = [min + step * i, min + step * (i + 1))   for i < len(palette) - 1
    last  = [min + step * (len(palette) - 1), +inf)

The last bin starts at ``max`` and is open-ended.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from windscape.analysis.models import LegendBin
from windscape.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def generate_legend_bins(
    min_value: float, max_value: float, palette: Sequence[str]
) -> list[LegendBin]:
    """Map ``[min_value, max_value]`` onto one bin per palette color.

    Args:
        min_value: Lower end of the stretch.
        max_value: Upper end of the stretch (start of the open "+" bin).
        palette: Ordered colors, at least two.

    Returns:
        ``len(palette)`` contiguous bins; only the last has ``upper_bound=None``.

    Raises:
        ConfigurationError: Fewer than two colors, non-finite bounds, or
            ``min_value >= max_value``.
    """
    colors = list(palette)
    if len(colors) < 2:
        msg = f"Legend palette needs at least 2 colors, got {len(colors)}"
        raise ConfigurationError(msg)
    if not (math.isfinite(min_value) and math.isfinite(max_value)):
        msg = f"Legend bounds must be finite, got [{min_value}, {max_value}]"
        raise ConfigurationError(msg)
    if min_value >= max_value:
        msg = f"Legend min ({min_value}) must be less than max ({max_value})"
        raise ConfigurationError(msg)

    last = len(colors) - 1
    step = (max_value - min_value) / last
    bins: list[LegendBin] = []
    for i, color in enumerate(colors):
        lower = min_value + step * i
        upper = min_value + step * (i + 1) if i < last else None
        bins.append(LegendBin(color=color, lower_bound=lower, upper_bound=upper))
    return bins


def bin_for_value(bins: Sequence[LegendBin], value: float) -> LegendBin | None:
    """The bin containing ``value``, or None below the first bin / for NaN."""
    for legend_bin in bins:
        if legend_bin.contains(value):
            return legend_bin
    return None
