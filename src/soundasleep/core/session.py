"""Session orchestration: operator actions over buffer, timeline and acks."""

from __future__ import annotations

import dataclasses
import logging
import math
from datetime import datetime
from typing import Any, Callable, Tuple

import numpy as np

from ..config.runtime import BATTERY_RANGE, THRESHOLD_RANGE, VOLUME_RANGE, SoundAsleepConfig
from .ack import LatencyGatedAck, PendingAck
from .errors import ConfigurationError
from .impedance import ImpedanceSampler
from .models import (
    Algorithm,
    EventRecord,
    ImpedanceReading,
    PairingState,
    Sample,
    SessionConfig,
    SessionSummary,
)
from .sample_buffer import SampleBuffer, SampleGenerator, SyntheticEeg
from .timeline import EventTimeline

logger = logging.getLogger(__name__)

CALIBRATION_NOISE_MS = 20.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_latency_ms(volume_db: float, noise: float, *, floor_ms: int = 80) -> int:
    """
    Latency estimate for a calibration run at ``volume_db``.

    ``noise`` is a draw from ``[0, 1)``. Lower volumes give longer
    estimates; the result never drops below ``floor_ms``.
    """
    raw = 100.0 + (60.0 - float(volume_db)) * 0.6 + float(noise) * CALIBRATION_NOISE_MS
    return max(int(floor_ms), _round_half_up(raw))


class SessionController:
    """
    Single writer for the session state.

    Owns the :class:`SampleBuffer`, :class:`EventTimeline`,
    :class:`ImpedanceSampler` and :class:`LatencyGatedAck`, applies operator
    actions and hands renderers immutable snapshots. All methods are meant to
    be called from one event-loop thread.
    """

    def __init__(
        self,
        config: SoundAsleepConfig | None = None,
        *,
        scheduler: LatencyGatedAck | None = None,
        rng: np.random.Generator | None = None,
        generator: SampleGenerator | None = None,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = (config or SoundAsleepConfig()).sanitized()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._scheduler = scheduler if scheduler is not None else LatencyGatedAck()
        self._generator = generator or SyntheticEeg(self._rng)

        settings = self._settings
        self._buffer = SampleBuffer(settings.sample_capacity, settings.fill_value)
        self._timeline = EventTimeline(settings.timeline_capacity, clock=wall_clock)
        self._impedance = ImpedanceSampler(
            self._rng, value_range=(settings.impedance_min, settings.impedance_max)
        )
        self._config = SessionConfig(
            demo_mode=settings.demo_mode,
            sw_threshold_z=settings.sw_threshold_z,
            volume_db=settings.volume_db,
            algorithm=Algorithm.parse(settings.algorithm),
            latency_estimate_ms=settings.latency_estimate_ms,
            battery_pct=settings.battery_pct,
        )
        self._disposed = False

        self._timeline.append("App initialized.")
        self._timeline.append("Awaiting device pairing…")

    # ------------------------------------------------------------ properties
    @property
    def settings(self) -> SoundAsleepConfig:
        return self._settings

    @property
    def scheduler(self) -> LatencyGatedAck:
        return self._scheduler

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------- snapshots
    def current_samples(self) -> Tuple[Sample, ...]:
        return self._buffer.snapshot()

    def current_values(self) -> np.ndarray:
        """Oldest-first sample values, for plotting."""
        return self._buffer.values()

    def current_impedances(self) -> Tuple[ImpedanceReading, ...]:
        # Refreshed whenever the oldest visible sample changes.
        return self._impedance.sample(self._settings.channel_count, self._buffer.first_sequence)

    def current_events(self) -> Tuple[EventRecord, ...]:
        return self._timeline.snapshot()

    def current_config(self) -> SessionConfig:
        return self._config

    def summary(self) -> SessionSummary:
        return SessionSummary.from_config(self._config)

    # ------------------------------------------------------------- streaming
    def tick(self) -> Sample | None:
        """Advance the live trace by one synthetic sample."""
        if self._disposed:
            return None
        return self._buffer.tick(self._generator)

    # --------------------------------------------------------------- actions
    def pair(self) -> bool:
        """Mark the headband as paired. Returns ``False`` if nothing changed."""
        if not self._accepting("pair"):
            return False
        if self._config.paired:
            logger.debug("Headband already paired")
            return False
        self._update(pairing_state=PairingState.PAIRED)
        self._timeline.append("Headband paired via BLE.")
        return True

    def calibrate(self) -> int | None:
        """Re-estimate the audio latency from the current volume."""
        if not self._accepting("calibrate"):
            return None
        if self._settings.require_pairing_for_calibration and not self._config.paired:
            logger.info("Calibration refused: headband not paired")
            self._timeline.append("Calibration skipped: headband not paired.")
            return None
        estimate = estimate_latency_ms(
            self._config.volume_db,
            self._rng.random(),
            floor_ms=self._settings.latency_floor_ms,
        )
        self._update(latency_estimate_ms=estimate)
        self._timeline.append(f"Audio latency calibrated → {estimate} ms")
        return estimate

    def trigger_test_burst(self) -> PendingAck | None:
        """Request a pink-noise burst; the ACK is logged after the latency estimate."""
        if not self._accepting("trigger_test_burst"):
            return None
        latency = self._config.latency_estimate_ms
        self._timeline.append("Pink-noise test burst requested.")
        return self._scheduler.schedule(
            latency,
            lambda: self._timeline.append(f"Pink-noise playback ACK (Δt={latency} ms)."),
        )

    def set_stimulation(self, enabled: bool) -> None:
        if self._accepting("set_stimulation"):
            self._update(stimulation_enabled=bool(enabled))

    def set_demo_mode(self, enabled: bool) -> None:
        if self._accepting("set_demo_mode"):
            self._update(demo_mode=bool(enabled))

    def set_threshold(self, z: Any) -> int:
        self._set_bounded("sw_threshold_z", z, THRESHOLD_RANGE)
        return self._config.sw_threshold_z

    def set_volume(self, db: Any) -> int:
        self._set_bounded("volume_db", db, VOLUME_RANGE)
        return self._config.volume_db

    def set_battery(self, pct: Any) -> int:
        self._set_bounded("battery_pct", pct, BATTERY_RANGE)
        return self._config.battery_pct

    def set_algorithm(self, algorithm: Algorithm | str) -> Algorithm:
        if self._accepting("set_algorithm"):
            try:
                self._update(algorithm=Algorithm.parse(algorithm))
            except ValueError as exc:
                logger.warning("Algorithm unchanged: %s", exc)
        return self._config.algorithm

    # ------------------------------------------------------------- lifecycle
    def dispose(self) -> None:
        """Cancel pending acknowledgements; further actions are ignored."""
        if self._disposed:
            return
        self._disposed = True
        self._scheduler.close()
        logger.info("Session disposed")

    # --------------------------------------------------------------- helpers
    def _accepting(self, action: str) -> bool:
        if self._disposed:
            logger.warning("Ignoring %s on a disposed session", action)
            return False
        return True

    def _update(self, **changes: Any) -> None:
        self._config = dataclasses.replace(self._config, **changes)

    def _set_bounded(self, name: str, value: Any, bounds: Tuple[int, int]) -> None:
        if not self._accepting(f"set {name}"):
            return
        try:
            self._update(**{name: _coerce_int(name, value, bounds)})
        except ConfigurationError as exc:
            logger.warning("Keeping %s=%s: %s", name, getattr(self._config, name), exc)


def _coerce_int(name: str, value: Any, bounds: Tuple[int, int]) -> int:
    """
    Round ``value`` and clamp it into ``bounds``.

    Raises :class:`ConfigurationError` for values that are not finite numbers.
    """
    lo, hi = bounds
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name}={value!r} is not a number") from None
    if not math.isfinite(number):
        raise ConfigurationError(f"{name}={value!r} is not finite")
    if number < lo or number > hi:
        clamped = lo if number < lo else hi
        logger.warning("%s=%r outside [%d, %d]; clamped to %d", name, value, lo, hi, clamped)
        return clamped
    return _round_half_up(number)


__all__ = ["CALIBRATION_NOISE_MS", "SessionController", "estimate_latency_ms"]
