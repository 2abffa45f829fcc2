"""
Pixel buffer value types handed over by the capture surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np


@dataclass(frozen=True)
class Rect:
    """Axis-aligned sub-rectangle in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def clip(self, width: int, height: int) -> Optional["Rect"]:
        """Intersect with a ``width`` x ``height`` frame; ``None`` if empty."""

        x0 = max(self.x, 0)
        y0 = max(self.y, 0)
        x1 = min(self.x + self.width, width)
        y1 = min(self.y + self.height, height)
        if x1 <= x0 or y1 <= y0:
            return None
        return Rect(x0, y0, x1 - x0, y1 - y0)


class PixelBuffer:
    """
    RGBA frame with 8-bit channels stored as a flat array.

    Parameters
    ----------
    width, height : int
        Frame dimensions in pixels.
    data : Sequence[int] or np.ndarray
        ``width * height * 4`` samples (R, G, B, A per pixel) in [0, 255].
    """

    def __init__(self, width: int, height: int, data: Union[Sequence[int], np.ndarray]) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Invalid frame size {width}x{height}")

        flat = np.asarray(data)
        if flat.size and not np.issubdtype(flat.dtype, np.integer):
            raise ValueError(f"Channel samples must be integers in [0, 255], got dtype {flat.dtype}")
        if flat.size != width * height * 4:
            raise ValueError(
                f"Expected {width * height * 4} samples for a {width}x{height} RGBA frame, "
                f"got {flat.size}"
            )
        if flat.size and (flat.min() < 0 or flat.max() > 255):
            raise ValueError("Channel samples must lie in [0, 255]")

        self.width = int(width)
        self.height = int(height)
        self.data = flat.astype(np.uint8).reshape(-1)
        self.data.flags.writeable = False

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an ``(H, W, 3)`` or ``(H, W, 4)`` uint8 image."""

        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise ValueError(f"Expected H×W×3 or H×W×4 image, got shape {image.shape}")

        height, width = image.shape[:2]
        if image.shape[2] == 3:
            alpha = np.full((height, width, 1), 255, dtype=image.dtype)
            image = np.concatenate([image, alpha], axis=2)

        return cls(width, height, image.reshape(-1))

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def rgb(self) -> np.ndarray:
        """Return an ``(H, W, 3)`` view of the color channels."""

        return self.data.reshape(self.height, self.width, 4)[:, :, :3]

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"


def crop_to_aspect(buffer: PixelBuffer, ratio: float) -> Rect:
    """
    Centered crop matching a target aspect ratio (width / height).

    The wider dimension is trimmed equally on both sides, e.g. ``3 / 2`` on a
    4:3 frame trims the top and bottom.
    """

    if ratio <= 0:
        raise ValueError(f"Aspect ratio must be positive, got {ratio}")
    if buffer.pixel_count == 0:
        return Rect(0, 0, 0, 0)

    frame_ratio = buffer.width / buffer.height
    if frame_ratio > ratio:
        width = buffer.height * ratio
        height = float(buffer.height)
    else:
        width = float(buffer.width)
        height = buffer.width / ratio

    width_px = int(round(width))
    height_px = int(round(height))
    x = int(round((buffer.width - width) / 2))
    y = int(round((buffer.height - height) / 2))
    return Rect(x, y, width_px, height_px)
