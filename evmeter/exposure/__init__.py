"""Exposure value calculation and exposure solving."""

from evmeter.exposure.ev import clamp_luminance, compute_ev, luminance_to_ev
from evmeter.exposure.solver import (
    INVALID,
    ExposureSolution,
    aperture_from_ev,
    resolve_aperture,
    resolve_shutter,
    shutter_from_ev,
    solve,
)

__all__ = [
    "clamp_luminance",
    "luminance_to_ev",
    "compute_ev",
    "INVALID",
    "ExposureSolution",
    "shutter_from_ev",
    "aperture_from_ev",
    "resolve_shutter",
    "resolve_aperture",
    "solve",
]
