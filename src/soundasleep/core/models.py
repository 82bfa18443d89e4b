"""Shared dataclasses for Sound Asleep sessions, samples and events."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class PairingState(str, enum.Enum):
    UNPAIRED = "Unpaired"
    PAIRED = "Paired"


class Algorithm(str, enum.Enum):
    """Staging / slow-wave algorithm selectable from the session panel."""

    YASA = "YASA"
    COSLEEP = "CoSleep"

    @property
    def label(self) -> str:
        return ALGORITHM_LABELS[self]

    @classmethod
    def parse(cls, value: "Algorithm | str") -> "Algorithm":
        """Resolve ``value`` case-insensitively; raise ``ValueError`` if unknown."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text or member.name.lower() == text:
                return member
        raise ValueError(f"Unknown algorithm {value!r}")


ALGORITHM_LABELS = {
    Algorithm.YASA: "YASA (staging + SW)",
    Algorithm.COSLEEP: "CoSleep (closed-loop)",
}


@dataclass(frozen=True, slots=True)
class Sample:
    sequence: int
    value: float


@dataclass(frozen=True, slots=True)
class ImpedanceReading:
    channel_index: int
    value: float

    @property
    def grade(self) -> str:
        return impedance_grade(self.value)


def impedance_grade(value: float) -> str:
    """Return ``"good"``, ``"fair"`` or ``"poor"`` for an impedance in kΩ."""
    if value < 25.0:
        return "good"
    if value < 60.0:
        return "fair"
    return "poor"


@dataclass(frozen=True, slots=True)
class EventRecord:
    """Immutable entry of the session event log."""

    timestamp: str
    message: str

    def display(self) -> str:
        return f"{self.timestamp}  {self.message}"


@dataclass(frozen=True)
class SessionConfig:
    """
    Snapshot of the operator-facing session settings.

    Instances are immutable; :class:`~soundasleep.core.session.SessionController`
    swaps in a new snapshot on every action so renderers can hold on to the
    value they were given.
    """

    pairing_state: PairingState = PairingState.UNPAIRED
    demo_mode: bool = True
    stimulation_enabled: bool = False
    sw_threshold_z: int = 65
    volume_db: int = 55
    algorithm: Algorithm = Algorithm.YASA
    latency_estimate_ms: int = 120
    battery_pct: int = 78

    @property
    def paired(self) -> bool:
        return self.pairing_state is PairingState.PAIRED


@dataclass(frozen=True)
class SessionSummary:
    """Derived figures shown in the staging & events panel."""

    detected_slow_waves: int
    stim_bursts: int
    avg_phase_error_ms: int

    @classmethod
    def from_config(cls, config: SessionConfig) -> "SessionSummary":
        bonus = 5 if config.stimulation_enabled else 3
        return cls(
            detected_slow_waves=int(config.sw_threshold_z // 10 + bonus),
            stim_bursts=6 if config.stimulation_enabled else 0,
            avg_phase_error_ms=max(0, int(config.latency_estimate_ms) - 100),
        )
