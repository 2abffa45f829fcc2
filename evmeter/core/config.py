"""
Configuration primitives for evmeter.

Defines enums for priority modes, calibration presets and aperture scales,
plus dataclasses collecting the calibration profile and meter parameters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from evmeter.core.errors import InvalidParameterError


class PriorityMode(Enum):
    """Which exposure parameter the user holds fixed."""

    APERTURE = "aperture"  # aperture held, shutter solved
    SHUTTER = "shutter"    # shutter held, aperture solved

    def toggled(self) -> "PriorityMode":
        return PriorityMode.SHUTTER if self is PriorityMode.APERTURE else PriorityMode.APERTURE


class CalibrationPreset(Enum):
    """Named calibration profiles."""

    CENTER_WEIGHTED = "center_weighted"  # Rec. 709, gamma corrected, center weighted
    SIMPLE = "simple"                    # single-factor, uniform average


class WeightNormalization(Enum):
    """Divisor of the center-weighted luminance sum."""

    PIXEL_COUNT = "pixel_count"  # sum(L * w) / N, the calibrated reference
    WEIGHT_SUM = "weight_sum"    # sum(L * w) / sum(w), keeps a white frame at 1.0


class ApertureScale(Enum):
    """Aperture table used for snapping."""

    STANDARD = "standard"  # includes the 1.2 and 1.8 intermediate stops
    MINIMAL = "minimal"    # full stops only


@dataclass(frozen=True)
class CalibrationProfile:
    """
    Luminance to EV calibration.

    ``calibration_factor`` is a property of the device/profile and is never
    derived from the image.
    """

    base_calibration_factor: float = 12.5
    device_brightness_compensation: float = 1.2  # tuned on device

    # Metering pattern
    center_weighted: bool = True
    center_weight: float = 0.6     # weight of the center region
    center_fraction: float = 0.4   # center region size relative to width/height
    weight_normalization: WeightNormalization = WeightNormalization.PIXEL_COUNT

    # Shadow floor and highlight ceiling
    min_luminance: float = 0.001
    max_luminance: float = 0.95

    @property
    def calibration_factor(self) -> float:
        return self.base_calibration_factor * self.device_brightness_compensation

    @classmethod
    def from_preset(cls, preset: CalibrationPreset) -> "CalibrationProfile":
        """Build one of the named calibration profiles."""

        if preset == CalibrationPreset.CENTER_WEIGHTED:
            return cls()

        if preset == CalibrationPreset.SIMPLE:
            return cls(
                base_calibration_factor=1.2,
                device_brightness_compensation=1.0,
                center_weighted=False,
            )

        raise InvalidParameterError(f"Unknown calibration preset: {preset}")

    def validate(self) -> None:
        """Validate calibration parameters."""

        if not self.calibration_factor > 0:
            raise InvalidParameterError(
                f"Calibration factor {self.calibration_factor} must be positive"
            )

        if not (0.0 <= self.center_weight <= 1.0):
            raise InvalidParameterError(f"Center weight {self.center_weight} out of range [0, 1]")

        if not (0.0 < self.center_fraction <= 1.0):
            raise InvalidParameterError(
                f"Center fraction {self.center_fraction} out of range (0, 1]"
            )

        if not (0.0 < self.min_luminance < self.max_luminance <= 1.0):
            raise InvalidParameterError(
                f"Luminance clamp [{self.min_luminance}, {self.max_luminance}] is not a valid "
                "sub-interval of (0, 1]"
            )


@dataclass
class MeterConfig:
    """
    Complete configuration for a metering session.

    All parameters have sensible defaults for a phone or webcam meter.
    """

    calibration: CalibrationProfile = field(default_factory=CalibrationProfile)
    aperture_scale: ApertureScale = ApertureScale.STANDARD

    # Session defaults
    default_mode: PriorityMode = PriorityMode.APERTURE
    default_iso: float = 100.0
    default_aperture: float = 2.8
    default_shutter: float = 1.0 / 60.0  # seconds

    # Bounds
    max_compensation: float = 3.0  # EV, symmetric
    max_pixels: int = 1920 * 1080  # frames above this are subsampled
    history_size: int = 50

    def validate(self) -> None:
        """Validate configuration parameters."""

        # evmeter.scales imports this module
        from evmeter.scales.standard import APERTURE_RANGE, SHUTTER_RANGE

        self.calibration.validate()

        if not (math.isfinite(self.default_iso) and self.default_iso > 0):
            raise InvalidParameterError(f"Default ISO {self.default_iso} must be positive")

        if not (APERTURE_RANGE[0] <= self.default_aperture <= APERTURE_RANGE[1]):
            raise InvalidParameterError(
                f"Default aperture {self.default_aperture} out of range {APERTURE_RANGE}"
            )

        if not (SHUTTER_RANGE[0] <= self.default_shutter <= SHUTTER_RANGE[1]):
            raise InvalidParameterError(
                f"Default shutter {self.default_shutter} out of range {SHUTTER_RANGE}"
            )

        if not (0 <= self.max_compensation <= 10):
            raise InvalidParameterError(
                f"Max compensation {self.max_compensation} out of range [0, 10]"
            )

        if self.max_pixels < 1:
            raise InvalidParameterError(f"Max pixels {self.max_pixels} must be at least 1")

        if self.history_size < 0:
            raise InvalidParameterError(f"History size {self.history_size} must be non-negative")
