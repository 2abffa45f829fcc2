"""
Light meter session controller.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from evmeter.core.config import CalibrationPreset, CalibrationProfile, MeterConfig, PriorityMode
from evmeter.core.errors import InvalidParameterError, NotReadyError
from evmeter.exposure.ev import compute_ev
from evmeter.exposure.solver import check_iso, solve
from evmeter.luminance.buffer import PixelBuffer, Rect
from evmeter.luminance.sampler import sample_luminance
from evmeter.scales.standard import (
    APERTURE_RANGE,
    SHUTTER_RANGE,
    STANDARD_SHUTTER_SPEEDS,
    aperture_table,
)

logger = logging.getLogger(__name__)

Frames = Union[Optional[PixelBuffer], Sequence[PixelBuffer]]


@dataclass(frozen=True)
class MeterState:
    """Snapshot of the current exposure settings."""

    mode: PriorityMode
    iso: float
    compensation: float
    aperture: float
    shutter: float
    ev: Optional[float]
    valid: bool


@dataclass(frozen=True)
class MeasurementRecord:
    """One completed measurement cycle."""

    ev: float
    luminance: float
    aperture: float
    shutter: float
    iso: float
    compensation: float
    mode: PriorityMode
    valid: bool
    timestamp: float


class LightMeter:
    """
    Holds the exposure state of a metering session and re-solves it.

    Pipeline for :meth:`measure`:
        1. Luminance sampling of each frame
        2. EV calculation (mean over frames)
        3. Exposure solve for the active priority mode

    Setters re-solve from the last measured EV without taking a new sample:
    ISO and exposure compensation are computational parameters, not optical
    measurements. Changing the solved (driven) parameter only stores it.
    """

    def __init__(self, config: Optional[MeterConfig] = None) -> None:
        self.config = config or MeterConfig()
        self.config.validate()

        self._apertures = aperture_table(self.config.aperture_scale)
        self._shutter_speeds = STANDARD_SHUTTER_SPEEDS

        self._mode = self.config.default_mode
        self._iso = float(self.config.default_iso)
        self._compensation = 0.0
        self._aperture = float(self.config.default_aperture)
        self._shutter = float(self.config.default_shutter)
        self._ev: Optional[float] = None
        self._valid = True

        self._history: deque = deque(maxlen=self.config.history_size)

        # Only one measurement cycle at a time; state writes are serialized.
        self._measure_lock = threading.Lock()
        self._state_lock = threading.RLock()

        logger.info("Initializing light meter")
        logger.info("  Mode: %s", self._mode.value)
        logger.info("  Calibration factor: %.2f", self.config.calibration.calibration_factor)
        logger.info("  Aperture scale: %s", self.config.aperture_scale.value)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> PriorityMode:
        return self._mode

    @property
    def iso(self) -> float:
        return self._iso

    @property
    def compensation(self) -> float:
        return self._compensation

    @property
    def aperture(self) -> float:
        return self._aperture

    @property
    def shutter_speed(self) -> float:
        return self._shutter

    @property
    def ev(self) -> Optional[float]:
        return self._ev

    @property
    def valid(self) -> bool:
        return self._valid

    @property
    def state(self) -> MeterState:
        with self._state_lock:
            return MeterState(
                mode=self._mode,
                iso=self._iso,
                compensation=self._compensation,
                aperture=self._aperture,
                shutter=self._shutter,
                ev=self._ev,
                valid=self._valid,
            )

    @property
    def history(self) -> List[MeasurementRecord]:
        """Measurements of this session, oldest first."""

        with self._state_lock:
            return list(self._history)

    def clear_history(self) -> None:
        with self._state_lock:
            self._history.clear()

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_aperture(self, value: float) -> MeterState:
        value = _check_range("Aperture", value, APERTURE_RANGE)
        with self._state_lock:
            self._aperture = value
            if self._mode == PriorityMode.APERTURE:
                self._resolve()
        return self.state

    def set_shutter_speed(self, value: float) -> MeterState:
        value = _check_range("Shutter speed", value, SHUTTER_RANGE)
        with self._state_lock:
            self._shutter = value
            if self._mode == PriorityMode.SHUTTER:
                self._resolve()
        return self.state

    def set_iso(self, value: float) -> MeterState:
        value = check_iso(value)
        with self._state_lock:
            self._iso = value
            self._resolve()
        return self.state

    def set_exposure_compensation(self, value: float) -> MeterState:
        limit = self.config.max_compensation
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidParameterError(f"Exposure compensation must be a number, got {value!r}") from None
        if not (math.isfinite(value) and -limit <= value <= limit):
            raise InvalidParameterError(
                f"Exposure compensation {value} out of range [{-limit}, {limit}]"
            )

        with self._state_lock:
            self._compensation = value
            self._resolve()
        return self.state

    def set_priority_mode(self, mode: Union[PriorityMode, str]) -> MeterState:
        try:
            mode = PriorityMode(mode)
        except ValueError:
            raise InvalidParameterError(f"Unknown priority mode: {mode!r}") from None

        with self._state_lock:
            if mode != self._mode:
                logger.info("Priority mode: %s -> %s", self._mode.value, mode.value)
                self._mode = mode
                self._restore_held_value()
                self._resolve()
        return self.state

    def toggle_priority_mode(self) -> MeterState:
        """Swap held and driven parameters and re-solve from the cached EV."""

        with self._state_lock:
            return self.set_priority_mode(self._mode.toggled())

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def measure(self, frames: Frames, region: Optional[Rect] = None) -> Optional[MeasurementRecord]:
        """
        Run a full measurement cycle.

        Parameters
        ----------
        frames : PixelBuffer or Sequence[PixelBuffer]
            One frame, or several consecutive frames averaged to reduce noise.
        region : Rect, optional
            Metering area applied to every frame.

        Returns
        -------
        MeasurementRecord or None
            ``None`` when no frame is ready or another cycle is in flight.
        """

        if not self._measure_lock.acquire(blocking=False):
            logger.warning("Measurement already in progress, ignoring request")
            return None

        try:
            if frames is None or isinstance(frames, PixelBuffer):
                buffers = [frames]
            else:
                buffers = list(frames)

            calibration = self.config.calibration
            try:
                if not buffers:
                    raise NotReadyError("No frames supplied")
                luminances = [
                    sample_luminance(
                        buffer,
                        region=region,
                        profile=calibration,
                        max_pixels=self.config.max_pixels,
                    )
                    for buffer in buffers
                ]
            except NotReadyError as exc:
                logger.debug("Skipping measurement: %s", exc)
                return None

            ev = compute_ev(luminances[0], luminances[1:], calibration)

            with self._state_lock:
                self._ev = ev
                self._resolve()
                record = MeasurementRecord(
                    ev=ev,
                    luminance=sum(luminances) / len(luminances),
                    aperture=self._aperture,
                    shutter=self._shutter,
                    iso=self._iso,
                    compensation=self._compensation,
                    mode=self._mode,
                    valid=self._valid,
                    timestamp=time.time(),
                )
                self._history.append(record)

            logger.info(
                "Measured EV %.2f from %d frame(s): f/%s at %.5gs (valid=%s)",
                ev, len(buffers), record.aperture, record.shutter, record.valid,
            )
            return record
        finally:
            self._measure_lock.release()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self) -> None:
        if self._ev is None:
            return

        solution = solve(
            self._ev,
            self._iso,
            self._compensation,
            self._mode,
            self._aperture,
            self._shutter,
            apertures=self._apertures,
            shutter_speeds=self._shutter_speeds,
        )
        self._aperture = solution.aperture
        self._shutter = solution.shutter
        self._valid = solution.valid

    def _restore_held_value(self) -> None:
        # A held sentinel can never solve; fall back to the session default.
        if self._mode == PriorityMode.APERTURE and self._aperture <= 0:
            self._aperture = float(self.config.default_aperture)
            logger.info("Held aperture was invalid, reset to f/%s", self._aperture)
        elif self._mode == PriorityMode.SHUTTER and self._shutter <= 0:
            self._shutter = float(self.config.default_shutter)
            logger.info("Held shutter speed was invalid, reset to %.5gs", self._shutter)


def _check_range(name: str, value: float, bounds: Sequence[float]) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}") from None

    low, high = bounds
    if not (low <= value <= high):
        raise InvalidParameterError(f"{name} {value} out of range [{low}, {high}]")
    return value


def meter_frame(
    buffer: PixelBuffer,
    iso: float = 100.0,
    mode: PriorityMode = PriorityMode.APERTURE,
    aperture: float = 2.8,
    shutter: float = 1.0 / 60.0,
    compensation: float = 0.0,
    preset: CalibrationPreset = CalibrationPreset.CENTER_WEIGHTED,
) -> Optional[MeasurementRecord]:
    """
    Convenience wrapper for a one-shot measurement.
    """

    config = MeterConfig(
        calibration=CalibrationProfile.from_preset(preset),
        default_mode=mode,
        default_iso=iso,
        default_aperture=aperture,
        default_shutter=shutter,
    )

    meter = LightMeter(config)
    meter.set_exposure_compensation(compensation)
    return meter.measure(buffer)
