"""
Exception types raised by the metering core.
"""

from __future__ import annotations


class EvMeterError(Exception):
    """Base class for all metering errors."""


class NotReadyError(EvMeterError, RuntimeError):
    """The capture surface has not produced a usable frame yet."""


class InvalidParameterError(EvMeterError, ValueError):
    """A parameter violates its precondition (ISO <= 0, compensation out of bounds, ...)."""
