"""Error types raised (and handled) inside the core components."""

from __future__ import annotations


class SoundAsleepError(Exception):
    """Base class for all Sound Asleep core errors."""


class ConfigurationError(SoundAsleepError, ValueError):
    """A setting was outside its declared bound or not a usable value."""


class TimerSchedulingError(SoundAsleepError, ValueError):
    """A deferred callback was requested with a negative or non-finite delay."""


class GeneratorError(SoundAsleepError):
    """The sample generator failed or produced a non-finite value."""


__all__ = [
    "SoundAsleepError",
    "ConfigurationError",
    "TimerSchedulingError",
    "GeneratorError",
]
