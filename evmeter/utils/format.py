"""
Human-readable rendering of exposure settings.
"""

from __future__ import annotations

from typing import Optional

INVALID_TEXT = "--"


def format_shutter_speed(seconds: Optional[float]) -> str:
    """
    Render an exposure time the way cameras display it.

    Sub-second times become reciprocals (``1/125``), longer times use the
    seconds mark (``2"``). ``0`` and ``None`` are the invalid sentinel.
    """

    if not seconds or seconds <= 0:
        return INVALID_TEXT

    if seconds < 1.0:
        return f"1/{round(1.0 / seconds)}"

    return f'{seconds:g}"'


def format_aperture(f_number: Optional[float]) -> str:
    if not f_number or f_number <= 0:
        return INVALID_TEXT
    return f"f/{f_number:.1f}"


def format_ev(ev: Optional[float]) -> str:
    if ev is None:
        return f"EV {INVALID_TEXT}"
    return f"EV {ev:.1f}"
