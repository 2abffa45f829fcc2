"""
Tests for pixel buffers and luminance sampling.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from evmeter import CalibrationPreset, CalibrationProfile, NotReadyError, WeightNormalization
from evmeter.exposure import compute_ev
from evmeter.luminance import (
    PixelBuffer,
    Rect,
    center_weights,
    crop_to_aspect,
    relative_luminance,
    sample_luminance,
    srgb_to_linear,
)


def _solid(height: int, width: int, value: int) -> PixelBuffer:
    return PixelBuffer.from_array(np.full((height, width, 3), value, dtype=np.uint8))


WEIGHT_SUM = CalibrationProfile(weight_normalization=WeightNormalization.WEIGHT_SUM)


def test_black_frame_is_zero() -> None:
    frame = _solid(16, 16, 0)
    assert sample_luminance(frame, center_weighted=False) == 0.0
    assert sample_luminance(frame, center_weighted=True) == 0.0


def test_white_frame_is_one() -> None:
    frame = _solid(16, 16, 255)
    assert sample_luminance(frame, center_weighted=False) == pytest.approx(1.0)
    assert sample_luminance(frame, center_weighted=True, profile=WEIGHT_SUM) == pytest.approx(1.0)


def test_random_frames_stay_in_unit_range() -> None:
    rng = np.random.default_rng(0)
    for _ in range(5):
        img = rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8)
        frame = PixelBuffer(32, 24, img.reshape(-1))
        value = sample_luminance(frame)
        assert 0.0 <= value <= 1.0


def test_gray_frame_matches_srgb_curve() -> None:
    frame = _solid(8, 8, 128)
    expected = float(srgb_to_linear(np.array(128 / 255.0)))
    assert sample_luminance(frame, center_weighted=False) == pytest.approx(expected)
    assert expected == pytest.approx(0.2158, abs=1e-3)


def test_srgb_linear_segment() -> None:
    np.testing.assert_allclose(srgb_to_linear(np.array([0.0, 0.03928])), [0.0, 0.03928 / 12.92])


def test_channel_weights_follow_rec709() -> None:
    img = np.zeros((4, 4, 3), dtype=np.uint8)
    img[:, :, 1] = 255
    green = sample_luminance(PixelBuffer.from_array(img), center_weighted=False)
    assert green == pytest.approx(0.7152)

    img = np.zeros((4, 4, 3), dtype=np.uint8)
    img[:, :, 2] = 255
    blue = sample_luminance(PixelBuffer.from_array(img), center_weighted=False)
    assert blue == pytest.approx(0.0722)


def test_alpha_channel_is_ignored() -> None:
    img = np.full((4, 4, 4), 200, dtype=np.uint8)
    opaque = sample_luminance(PixelBuffer.from_array(img))
    img[:, :, 3] = 0
    transparent = sample_luminance(PixelBuffer.from_array(img))
    assert opaque == transparent


def test_center_weighting_favours_center() -> None:
    img = np.zeros((10, 10, 3), dtype=np.uint8)
    # Center region of a 10px frame spans indices 3..7 inclusive.
    img[3:8, 3:8] = 255
    frame = PixelBuffer.from_array(img)

    uniform = sample_luminance(frame, center_weighted=False)
    weighted = sample_luminance(frame, center_weighted=True, profile=WEIGHT_SUM)

    assert uniform == pytest.approx(0.25)
    assert weighted == pytest.approx((25 * 0.6) / (25 * 0.6 + 75 * 0.4))
    assert weighted > uniform


def test_center_weights_layout() -> None:
    weights = center_weights(10, 10, center_weight=0.6, center_fraction=0.4)
    assert weights.shape == (10, 10)
    assert np.count_nonzero(weights == 0.6) == 25
    assert weights[0, 0] == pytest.approx(0.4)
    assert weights[5, 5] == 0.6


def test_profile_controls_weighting() -> None:
    img = np.zeros((10, 10, 3), dtype=np.uint8)
    img[3:8, 3:8] = 255
    frame = PixelBuffer.from_array(img)

    simple = CalibrationProfile.from_preset(CalibrationPreset.SIMPLE)
    weighted = CalibrationProfile.from_preset(CalibrationPreset.CENTER_WEIGHTED)

    assert sample_luminance(frame, profile=simple) == pytest.approx(0.25)
    # sum(L * w) / N: 25 white pixels at weight 0.6 over 100 pixels
    assert sample_luminance(frame, profile=weighted) == pytest.approx(0.15)


def test_region_restricts_metering_area() -> None:
    img = np.zeros((4, 8, 3), dtype=np.uint8)
    img[:, :4] = 255
    frame = PixelBuffer.from_array(img)

    assert sample_luminance(frame, region=Rect(0, 0, 4, 4), center_weighted=False) == pytest.approx(1.0)
    assert sample_luminance(frame, region=Rect(4, 0, 4, 4), center_weighted=False) == 0.0
    # Partially outside regions are clipped to the frame
    assert sample_luminance(frame, region=Rect(-2, -2, 6, 6), center_weighted=False) == pytest.approx(1.0)


def test_not_ready_conditions() -> None:
    with pytest.raises(NotReadyError):
        sample_luminance(None)
    with pytest.raises(NotReadyError):
        sample_luminance(PixelBuffer(0, 0, []))
    with pytest.raises(NotReadyError):
        sample_luminance(_solid(4, 4, 100), region=Rect(10, 10, 2, 2))


def test_sampling_is_deterministic() -> None:
    rng = np.random.default_rng(42)
    img = rng.integers(0, 256, size=(48, 64, 3), dtype=np.uint8)
    frame = PixelBuffer.from_array(img)
    assert sample_luminance(frame) == sample_luminance(frame)
    assert sample_luminance(frame) == sample_luminance(PixelBuffer.from_array(img.copy()))


def _strided_reference(img: np.ndarray, step: int, profile: CalibrationProfile) -> float:
    luminance = relative_luminance(srgb_to_linear(img[::step, ::step] / 255.0))
    weights = center_weights(
        img.shape[0], img.shape[1], profile.center_weight, profile.center_fraction
    )[::step, ::step]
    if profile.weight_normalization == WeightNormalization.PIXEL_COUNT:
        return float(np.sum(luminance * weights) / luminance.size)
    return float(np.sum(luminance * weights) / np.sum(weights))


def test_large_frames_are_subsampled() -> None:
    rng = np.random.default_rng(7)
    ramp = np.linspace(0, 255, 120)[np.newaxis, :, np.newaxis]
    noise = rng.integers(-30, 31, size=(100, 120, 3))
    img = np.clip(ramp + noise, 0, 255).astype(np.uint8)
    frame = PixelBuffer.from_array(img)

    # 12000 pixels under a 1000 pixel bound -> stride 4
    for profile in (CalibrationProfile(), WEIGHT_SUM):
        strided = sample_luminance(frame, profile=profile, max_pixels=1000)
        assert strided == pytest.approx(_strided_reference(img, 4, profile), rel=1e-12)
        assert strided == pytest.approx(sample_luminance(frame, profile=profile), rel=0.1)


def test_center_weighted_reading_matches_reference_calibration() -> None:
    # The 12.5 x 1.2 calibration was tuned against sum(L * w) / N.
    frame = _solid(100, 150, 255)
    height, width = 100, 150
    x0, y0 = math.floor(width * 0.3), math.floor(height * 0.3)
    x1, y1 = x0 + math.floor(width * 0.4), y0 + math.floor(height * 0.4)
    total = 0.0
    for y in range(height):
        for x in range(width):
            inside = x0 <= x <= x1 and y0 <= y <= y1
            total += 0.6 if inside else 0.4  # white pixel, L = 1
    reference = total / (height * width)

    profile = CalibrationProfile.from_preset(CalibrationPreset.CENTER_WEIGHTED)
    reading = sample_luminance(frame, profile=profile)
    assert reference == pytest.approx(0.43335)
    assert reading == pytest.approx(reference)

    normalised = sample_luminance(frame, profile=WEIGHT_SUM)
    assert normalised == pytest.approx(1.0)
    # The weight-sum reading hits the 0.95 highlight ceiling.
    shift = compute_ev(normalised, profile=profile) - compute_ev(reading, profile=profile)
    assert shift == pytest.approx(math.log2(0.95 / reference))


def test_pixel_buffer_validation() -> None:
    with pytest.raises(ValueError):
        PixelBuffer(2, 2, [0] * 15)
    with pytest.raises(ValueError):
        PixelBuffer(1, 1, [0, 0, 0, 256])
    with pytest.raises(ValueError):
        PixelBuffer.from_array(np.zeros((4, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(1, 1, [0.5, 0.5, 0.5, 1.0])
    with pytest.raises(ValueError):
        PixelBuffer.from_array(np.full((2, 2, 3), 0.8))


def test_pixel_buffer_from_rgb_adds_alpha() -> None:
    frame = _solid(3, 5, 7)
    assert frame.width == 5
    assert frame.height == 3
    assert frame.data.size == 3 * 5 * 4
    assert frame.data[3] == 255
    assert frame.rgb().shape == (3, 5, 3)


def test_crop_to_aspect() -> None:
    frame = _solid(300, 400, 0)
    assert crop_to_aspect(frame, 1.0) == Rect(50, 0, 300, 300)
    assert crop_to_aspect(frame, 3 / 2) == Rect(0, 17, 400, 267)
    assert crop_to_aspect(frame, 4 / 3) == Rect(0, 0, 400, 300)
    with pytest.raises(ValueError):
        crop_to_aspect(frame, 0.0)
