"""
Exposure solver.

Given an EV, ISO, exposure compensation and priority mode, derive the
complementary exposure parameter from the held one and snap it to the
standard scale::

    shutter  = 2**-(EV - comp) * (100 / ISO) * N**2
    aperture = sqrt(t * (100 / ISO) * 2**(EV - comp))

Solved values outside the physical range are reported as invalid with a 0
sentinel instead of being clamped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from evmeter.core.config import PriorityMode
from evmeter.core.errors import InvalidParameterError
from evmeter.scales.standard import (
    APERTURE_RANGE,
    SHUTTER_RANGE,
    STANDARD_APERTURES,
    STANDARD_SHUTTER_SPEEDS,
    nearest_standard,
)

logger = logging.getLogger(__name__)

INVALID = 0.0


@dataclass(frozen=True)
class ExposureSolution:
    """Result of a solve; the driven field is ``INVALID`` when ``valid`` is false."""

    aperture: float
    shutter: float
    valid: bool
    raw: float  # unsnapped solved value


def check_iso(iso: float) -> float:
    """Return ``iso`` as a float, rejecting zero, negative and non-numeric values."""

    try:
        value = float(iso)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"ISO must be a number, got {iso!r}") from None

    if not (math.isfinite(value) and value > 0):
        raise InvalidParameterError(f"ISO must be a positive finite number, got {iso!r}")
    return value


def _exp2(exponent: float) -> float:
    try:
        return math.pow(2.0, exponent)
    except OverflowError:
        return math.inf


def shutter_from_ev(ev: float, iso: float, compensation: float, aperture: float) -> float:
    """Unsnapped exposure time in seconds for a held aperture."""

    return _exp2(-(ev - compensation)) * (100.0 / iso) * aperture ** 2


def aperture_from_ev(ev: float, iso: float, compensation: float, shutter: float) -> float:
    """Unsnapped f-number for a held exposure time."""

    return math.sqrt(shutter * (100.0 / iso) * _exp2(ev - compensation))


def _resolve(raw: float, bounds: Tuple[float, float], scale: Sequence[float]) -> Tuple[float, bool]:
    low, high = bounds
    if not (math.isfinite(raw) and low <= raw <= high):
        return INVALID, False
    return nearest_standard(raw, scale), True


def resolve_shutter(
    raw: float, shutter_speeds: Sequence[float] = STANDARD_SHUTTER_SPEEDS
) -> Tuple[float, bool]:
    """Range-check and snap a solved exposure time; bounds are inclusive."""

    return _resolve(raw, SHUTTER_RANGE, shutter_speeds)


def resolve_aperture(
    raw: float, apertures: Sequence[float] = STANDARD_APERTURES
) -> Tuple[float, bool]:
    """Range-check and snap a solved f-number; bounds are inclusive."""

    return _resolve(raw, APERTURE_RANGE, apertures)


def solve(
    ev: float,
    iso: float,
    compensation: float,
    mode: PriorityMode,
    held_aperture: float,
    held_shutter: float,
    apertures: Sequence[float] = STANDARD_APERTURES,
    shutter_speeds: Sequence[float] = STANDARD_SHUTTER_SPEEDS,
) -> ExposureSolution:
    """
    Solve the driven exposure parameter for the active priority mode.

    In ``APERTURE`` mode the aperture is held and the shutter speed is solved;
    in ``SHUTTER`` mode the shutter speed is held and the aperture is solved.
    A held value of zero or less (e.g. an earlier invalid result) yields an
    invalid solution.

    Raises
    ------
    InvalidParameterError
        If ``iso`` is not a positive finite number.
    """

    iso = check_iso(iso)

    if mode == PriorityMode.APERTURE:
        if held_aperture <= 0:
            return ExposureSolution(held_aperture, INVALID, False, math.nan)
        raw = shutter_from_ev(ev, iso, compensation, held_aperture)
        shutter, valid = resolve_shutter(raw, shutter_speeds)
        solution = ExposureSolution(held_aperture, shutter, valid, raw)
    elif mode == PriorityMode.SHUTTER:
        if held_shutter <= 0:
            return ExposureSolution(INVALID, held_shutter, False, math.nan)
        raw = aperture_from_ev(ev, iso, compensation, held_shutter)
        aperture, valid = resolve_aperture(raw, apertures)
        solution = ExposureSolution(aperture, held_shutter, valid, raw)
    else:
        raise InvalidParameterError(f"Unknown priority mode: {mode}")

    if solution.valid:
        logger.debug(
            "Solved %s priority: EV %.2f ISO %s comp %+.1f -> raw %.5g, f/%s %.5gs",
            mode.value, ev, iso, compensation, raw, solution.aperture, solution.shutter,
        )
    else:
        logger.warning(
            "No valid exposure in %s priority: EV %.2f ISO %s comp %+.1f -> raw %.5g",
            mode.value, ev, iso, compensation, raw,
        )
    return solution
