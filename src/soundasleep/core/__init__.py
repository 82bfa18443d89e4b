"""Core session state: sample window, impedances, event log and acks.

Nothing here depends on Qt. :class:`SessionController` is the single writer
for every component; the GUI layer only drives it from timers and reads
snapshots back.
"""

from .errors import ConfigurationError, GeneratorError, SoundAsleepError, TimerSchedulingError
from .models import (
    Algorithm,
    EventRecord,
    ImpedanceReading,
    PairingState,
    Sample,
    SessionConfig,
    SessionSummary,
    impedance_grade,
)
from .sample_buffer import SampleBuffer, SyntheticEeg
from .impedance import ImpedanceSampler
from .timeline import EventTimeline
from .ack import LatencyGatedAck, PendingAck
from .session import SessionController, estimate_latency_ms

__all__ = [
    "SoundAsleepError",
    "ConfigurationError",
    "GeneratorError",
    "TimerSchedulingError",
    "Algorithm",
    "EventRecord",
    "ImpedanceReading",
    "PairingState",
    "Sample",
    "SessionConfig",
    "SessionSummary",
    "impedance_grade",
    "SampleBuffer",
    "SyntheticEeg",
    "ImpedanceSampler",
    "EventTimeline",
    "LatencyGatedAck",
    "PendingAck",
    "SessionController",
    "estimate_latency_ms",
]
