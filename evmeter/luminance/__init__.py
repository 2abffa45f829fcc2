"""Frame buffers and luminance sampling."""

from evmeter.luminance.buffer import PixelBuffer, Rect, crop_to_aspect
from evmeter.luminance.sampler import (
    center_weights,
    relative_luminance,
    sample_luminance,
    srgb_to_linear,
)

__all__ = [
    "PixelBuffer",
    "Rect",
    "crop_to_aspect",
    "srgb_to_linear",
    "relative_luminance",
    "center_weights",
    "sample_luminance",
]
