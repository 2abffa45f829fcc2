"""
Reduce an RGBA frame to a single relative luminance value.

The sampler linearises sRGB, applies Rec. 709 luminance weights and averages
the result, optionally favouring the center of the frame.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from evmeter.core.config import CalibrationProfile, WeightNormalization
from evmeter.core.errors import NotReadyError
from evmeter.luminance.buffer import PixelBuffer, Rect

logger = logging.getLogger(__name__)

# Rec. 709 luminance coefficients for linear RGB
REC709_COEFFS = np.array([0.2126, 0.7152, 0.0722])

SRGB_LINEAR_THRESHOLD = 0.03928


def srgb_to_linear(rgb: np.ndarray) -> np.ndarray:
    """
    Remove the sRGB transfer curve.

    Parameters
    ----------
    rgb : np.ndarray
        Gamma-encoded values normalised to [0, 1].
    """

    rgb = np.asarray(rgb, dtype=np.float64)
    return np.where(
        rgb <= SRGB_LINEAR_THRESHOLD,
        rgb / 12.92,
        np.power((rgb + 0.055) / 1.055, 2.4),
    )


def relative_luminance(rgb_linear: np.ndarray) -> np.ndarray:
    """Rec. 709 luminance of linear RGB with shape (..., 3)."""

    return np.dot(rgb_linear, REC709_COEFFS)


def center_weights(height: int, width: int, center_weight: float, center_fraction: float) -> np.ndarray:
    """
    Per-pixel weights for center-weighted metering.

    The center region spans ``center_fraction`` of each dimension, starting
    at ``floor(dim * (1 - center_fraction) / 2)``; both edges are inclusive.
    Pixels inside get ``center_weight``, the rest ``1 - center_weight``.
    """

    x0 = math.floor(width * (1.0 - center_fraction) / 2.0)
    y0 = math.floor(height * (1.0 - center_fraction) / 2.0)
    x1 = x0 + math.floor(width * center_fraction)
    y1 = y0 + math.floor(height * center_fraction)

    cols = np.arange(width)
    rows = np.arange(height)
    in_cols = (cols >= x0) & (cols <= x1)
    in_rows = (rows >= y0) & (rows <= y1)
    inside = in_rows[:, np.newaxis] & in_cols[np.newaxis, :]

    return np.where(inside, center_weight, 1.0 - center_weight)


def subsample_step(pixel_count: int, max_pixels: Optional[int]) -> int:
    """Stride keeping a strided grid at or under ``max_pixels``."""

    if max_pixels is None or pixel_count <= max_pixels:
        return 1
    return int(math.ceil(math.sqrt(pixel_count / max_pixels)))


def sample_luminance(
    buffer: Optional[PixelBuffer],
    region: Optional[Rect] = None,
    center_weighted: Optional[bool] = None,
    profile: Optional[CalibrationProfile] = None,
    max_pixels: Optional[int] = None,
) -> float:
    """
    Average relative luminance of a frame, in [0, 1].

    Parameters
    ----------
    buffer : PixelBuffer or None
        Frame from the capture surface. ``None`` means no frame yet.
    region : Rect, optional
        Metering area; defaults to the full frame. Center weighting is
        relative to this area.
    center_weighted : bool, optional
        Overrides ``profile.center_weighted``.
    profile : CalibrationProfile, optional
        Supplies the metering pattern. With the default
        ``WeightNormalization.PIXEL_COUNT`` a center-weighted reading is
        ``sum(L * w) / N`` and stays below 1.0 even for a white frame;
        ``WEIGHT_SUM`` divides by ``sum(w)`` instead.
    max_pixels : int, optional
        Larger areas are strided down to about this many pixels.

    Raises
    ------
    NotReadyError
        If there is no frame, the frame is empty, or ``region`` misses it.
    """

    if buffer is None:
        raise NotReadyError("No frame available")
    if buffer.pixel_count == 0:
        raise NotReadyError("Frame has no pixels")

    profile = profile or CalibrationProfile()
    if center_weighted is None:
        center_weighted = profile.center_weighted

    full = Rect(0, 0, buffer.width, buffer.height)
    area = (region or full).clip(buffer.width, buffer.height)
    if area is None:
        raise NotReadyError(f"Metering region {region} lies outside the {buffer!r} frame")

    rgb = buffer.rgb()[area.y:area.y + area.height, area.x:area.x + area.width]
    step = subsample_step(area.area, max_pixels)
    if step > 1:
        logger.debug("Subsampling %dx%d metering area with stride %d", area.width, area.height, step)
    rgb = rgb[::step, ::step]

    luminance = relative_luminance(srgb_to_linear(rgb / 255.0))

    if center_weighted:
        weights = center_weights(
            area.height,
            area.width,
            profile.center_weight,
            profile.center_fraction,
        )[::step, ::step]
        if profile.weight_normalization == WeightNormalization.PIXEL_COUNT:
            value = float(np.sum(luminance * weights) / luminance.size)
        elif np.sum(weights) > 0:
            value = float(np.average(luminance, weights=weights))
        else:
            value = float(np.mean(luminance))
    else:
        value = float(np.mean(luminance))

    value = float(np.clip(value, 0.0, 1.0))
    logger.debug("Sampled luminance %.5f over %s (center_weighted=%s)", value, area, center_weighted)
    return value
