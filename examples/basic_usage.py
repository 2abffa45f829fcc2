"""
Basic usage examples for evmeter.
"""

from __future__ import annotations

import logging

import numpy as np

from evmeter import (
    CalibrationPreset,
    CalibrationProfile,
    LightMeter,
    MeterConfig,
    PixelBuffer,
    PriorityMode,
    crop_to_aspect,
    format_aperture,
    format_ev,
    format_shutter_speed,
    meter_frame,
)


def _synthetic_frame(height: int = 480, width: int = 640, level: int = 110) -> PixelBuffer:
    rng = np.random.default_rng(0)
    img = np.clip(rng.normal(level, 25.0, size=(height, width, 3)), 0, 255).astype(np.uint8)
    return PixelBuffer.from_array(img)


def example_aperture_priority() -> None:
    """Meter a frame at f/8 and read back the shutter speed."""

    meter = LightMeter()
    meter.set_aperture(8.0)
    record = meter.measure(_synthetic_frame())
    if record is None:
        print("Frame not ready")
        return
    print(
        f"Aperture priority: {format_ev(record.ev)}, {format_aperture(record.aperture)}, "
        f"{format_shutter_speed(record.shutter)}"
    )


def example_parameter_changes() -> None:
    """ISO and compensation changes re-solve without a new frame."""

    meter = LightMeter(MeterConfig(default_mode=PriorityMode.SHUTTER))
    meter.set_shutter_speed(1 / 125)
    meter.measure(_synthetic_frame())

    for iso in (100, 400, 1600):
        state = meter.set_iso(iso)
        print(f"ISO {iso}: {format_aperture(state.aperture)} at {format_shutter_speed(state.shutter)}")

    state = meter.set_exposure_compensation(-1.0)
    print(f"-1 EV: {format_aperture(state.aperture)}")

    state = meter.toggle_priority_mode()
    print(f"Toggled to {state.mode.value} priority: {format_shutter_speed(state.shutter)}")


def example_simple_calibration() -> None:
    """Use the single-factor calibration on a 3:2 crop."""

    frame = _synthetic_frame()
    config = MeterConfig(calibration=CalibrationProfile.from_preset(CalibrationPreset.SIMPLE))
    meter = LightMeter(config)
    record = meter.measure(frame, region=crop_to_aspect(frame, 3 / 2))
    if record is not None:
        print(f"Simple calibration: {format_ev(record.ev)}")


def example_convenience_function() -> None:
    record = meter_frame(_synthetic_frame(level=200), iso=200, aperture=5.6)
    if record is not None:
        print(f"Convenience: {format_shutter_speed(record.shutter)} (valid={record.valid})")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Running evmeter basic examples...")
    example_aperture_priority()
    example_parameter_changes()
    example_simple_calibration()
    example_convenience_function()
