"""
Standard photographic value scales and log2 nearest-neighbour snapping.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

from evmeter.core.config import ApertureScale

# Adjacent entries are roughly one stop apart: a factor of sqrt(2) in
# f-number, a factor of 2 in exposure time.
STANDARD_APERTURES: Tuple[float, ...] = (
    1.0, 1.2, 1.4, 1.8, 2.0, 2.8, 4.0, 5.6, 8.0, 11.0, 16.0, 22.0,
)

MINIMAL_APERTURES: Tuple[float, ...] = (
    1.0, 1.4, 2.0, 2.8, 4.0, 5.6, 8.0, 11.0, 16.0, 22.0,
)

STANDARD_SHUTTER_SPEEDS: Tuple[float, ...] = (
    1 / 8000, 1 / 4000, 1 / 2000, 1 / 1000, 1 / 500, 1 / 250, 1 / 125,
    1 / 60, 1 / 30, 1 / 15, 1 / 8, 1 / 4, 1 / 2,
    1.0, 2.0, 4.0, 8.0, 15.0, 30.0,
)  # seconds

STANDARD_ISO_VALUES: Tuple[int, ...] = (50, 100, 200, 400, 800, 1600, 3200, 6400, 12800)

# Physical limits, inclusive
APERTURE_RANGE: Tuple[float, float] = (1.0, 22.0)
SHUTTER_RANGE: Tuple[float, float] = (1 / 8000, 30.0)


def aperture_table(scale: ApertureScale) -> Tuple[float, ...]:
    """Return the aperture table for the requested scale variant."""

    if scale == ApertureScale.STANDARD:
        return STANDARD_APERTURES

    if scale == ApertureScale.MINIMAL:
        return MINIMAL_APERTURES

    raise ValueError(f"Unknown aperture scale: {scale}")


def nearest_standard(value: float, scale: Sequence[float]) -> float:
    """
    Snap ``value`` to the closest entry of ``scale`` in log2 space.

    Stops are evenly spaced in log2, so linear distance would bias the result
    toward larger entries at the long end of each table. On an exact tie the
    earlier entry wins.

    Parameters
    ----------
    value : float
        Positive value to snap.
    scale : Sequence[float]
        Ascending table of positive candidates.
    """

    if not scale:
        raise ValueError("Cannot snap to an empty scale")
    if not (value > 0 and math.isfinite(value)):
        raise ValueError(f"Cannot snap non-positive or non-finite value {value}")

    target = math.log2(value)
    best = scale[0]
    best_distance = abs(math.log2(best) - target)

    for candidate in scale[1:]:
        distance = abs(math.log2(candidate) - target)
        if distance < best_distance:
            best = candidate
            best_distance = distance

    return best
