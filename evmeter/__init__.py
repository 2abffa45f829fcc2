"""evmeter: camera-based photographic light meter.

Estimates scene luminance from camera frames, converts it to an exposure
value and solves the complementary aperture or shutter speed for a given ISO
and exposure compensation, snapped to standard photographic scales.
"""

from evmeter.core.config import (
    ApertureScale,
    CalibrationPreset,
    CalibrationProfile,
    MeterConfig,
    PriorityMode,
    WeightNormalization,
)
from evmeter.core.errors import EvMeterError, InvalidParameterError, NotReadyError
from evmeter.core.meter import LightMeter, MeasurementRecord, MeterState, meter_frame
from evmeter.exposure import ExposureSolution, compute_ev, solve
from evmeter.luminance import PixelBuffer, Rect, crop_to_aspect, sample_luminance
from evmeter.scales import (
    MINIMAL_APERTURES,
    STANDARD_APERTURES,
    STANDARD_ISO_VALUES,
    STANDARD_SHUTTER_SPEEDS,
    nearest_standard,
)
from evmeter.utils.format import format_aperture, format_ev, format_shutter_speed

__all__ = [
    "LightMeter",
    "MeterConfig",
    "MeterState",
    "MeasurementRecord",
    "CalibrationProfile",
    "CalibrationPreset",
    "ApertureScale",
    "PriorityMode",
    "WeightNormalization",
    "EvMeterError",
    "NotReadyError",
    "InvalidParameterError",
    "PixelBuffer",
    "Rect",
    "crop_to_aspect",
    "sample_luminance",
    "compute_ev",
    "solve",
    "ExposureSolution",
    "nearest_standard",
    "STANDARD_APERTURES",
    "MINIMAL_APERTURES",
    "STANDARD_SHUTTER_SPEEDS",
    "STANDARD_ISO_VALUES",
    "format_shutter_speed",
    "format_aperture",
    "format_ev",
    "meter_frame",
]

__version__ = "0.1.0"
