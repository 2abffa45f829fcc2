"""
Luminance to exposure value conversion.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

import numpy as np

from evmeter.core.config import CalibrationProfile

logger = logging.getLogger(__name__)


def clamp_luminance(luminance: float, profile: CalibrationProfile) -> float:
    """Clamp to the profile's shadow floor and highlight ceiling."""

    return min(max(float(luminance), profile.min_luminance), profile.max_luminance)


def luminance_to_ev(luminance: float, profile: Optional[CalibrationProfile] = None) -> float:
    """EV of a single luminance sample: ``log2(L * 100 * calibration_factor)``."""

    profile = profile or CalibrationProfile()
    clamped = clamp_luminance(luminance, profile)
    return math.log2(clamped * 100.0 * profile.calibration_factor)


def compute_ev(
    luminance: float,
    samples: Optional[Iterable[float]] = None,
    profile: Optional[CalibrationProfile] = None,
) -> float:
    """
    Exposure value from one or more luminance samples.

    Each sample is clamped and converted on its own; the result is the mean of
    the per-sample EVs. The aggregate itself is not clamped and may be
    negative for dark scenes.

    Parameters
    ----------
    luminance : float
        Primary luminance sample in [0, 1].
    samples : Iterable[float], optional
        Additional samples (e.g. from consecutive frames) averaged with the
        primary one to reduce frame noise.
    profile : CalibrationProfile, optional
        Calibration; defaults to the center-weighted profile.
    """

    profile = profile or CalibrationProfile()
    values = [luminance]
    if samples is not None:
        values.extend(samples)

    evs = np.array([luminance_to_ev(value, profile) for value in values])
    ev = float(np.mean(evs))

    logger.debug("EV %.3f from %d sample(s), calibration factor %.3f", ev, len(values), profile.calibration_factor)
    return ev
