"""Standard aperture, shutter and ISO scales."""

from evmeter.scales.standard import (
    APERTURE_RANGE,
    MINIMAL_APERTURES,
    SHUTTER_RANGE,
    STANDARD_APERTURES,
    STANDARD_ISO_VALUES,
    STANDARD_SHUTTER_SPEEDS,
    aperture_table,
    nearest_standard,
)

__all__ = [
    "APERTURE_RANGE",
    "SHUTTER_RANGE",
    "STANDARD_APERTURES",
    "MINIMAL_APERTURES",
    "STANDARD_SHUTTER_SPEEDS",
    "STANDARD_ISO_VALUES",
    "aperture_table",
    "nearest_standard",
]
