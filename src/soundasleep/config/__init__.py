"""Configuration objects and helpers for Sound Asleep.

Settings are read from an optional YAML file (``--config`` or
``$SOUNDASLEEP_CONFIG``) into the typed :class:`SoundAsleepConfig` that sizes
the sample buffer and event log and seeds the session defaults.
"""

from .runtime import CONFIG_ENV_VAR, SoundAsleepConfig, config_from_mapping, load_config

__all__ = ["CONFIG_ENV_VAR", "SoundAsleepConfig", "config_from_mapping", "load_config"]
