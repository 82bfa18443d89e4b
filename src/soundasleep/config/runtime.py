"""Runtime configuration for the sample stream, event log and session defaults."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

CONFIG_ENV_VAR = "SOUNDASLEEP_CONFIG"

THRESHOLD_RANGE = (40, 90)
VOLUME_RANGE = (30, 80)
BATTERY_RANGE = (0, 100)
ALGORITHM_NAMES = ("YASA", "CoSleep")


def _clamp(value: Any, lo: float, hi: float, fallback: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return min(hi, max(lo, number))


_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
    return fallback


def _normalize_algorithm(value: Any) -> str:
    text = str(value or "").strip().lower()
    for name in ALGORITHM_NAMES:
        if name.lower() == text:
            return name
    return ALGORITHM_NAMES[0]


@dataclass(slots=True)
class SoundAsleepConfig:
    """
    Tuning knobs for the demo console.

    The defaults reproduce the prototype: a 256-sample trace refreshed at
    30 Hz, eight impedance channels and a 40-entry event log.
    """

    sample_capacity: int = 256
    sample_rate_hz: float = 30.0
    fill_value: float = 0.0
    channel_count: int = 8
    impedance_min: float = 15.0
    impedance_max: float = 95.0
    timeline_capacity: int = 40

    # Session defaults
    sw_threshold_z: int = 65
    volume_db: int = 55
    algorithm: str = "YASA"
    latency_estimate_ms: int = 120
    latency_floor_ms: int = 80
    battery_pct: int = 78
    demo_mode: bool = True
    require_pairing_for_calibration: bool = True

    def sanitized(self) -> SoundAsleepConfig:
        """Return a copy with every field coerced into its valid range."""
        imp_lo = _clamp(self.impedance_min, 0.0, 100.0, 15.0)
        imp_hi = _clamp(self.impedance_max, imp_lo, 100.0, max(imp_lo, 95.0))
        algorithm = _normalize_algorithm(self.algorithm)
        return SoundAsleepConfig(
            sample_capacity=int(_clamp(self.sample_capacity, 2, 100_000, 256)),
            sample_rate_hz=_clamp(self.sample_rate_hz, 1.0, 1000.0, 30.0),
            fill_value=_clamp(self.fill_value, -100.0, 100.0, 0.0),
            channel_count=int(_clamp(self.channel_count, 1, 64, 8)),
            impedance_min=imp_lo,
            impedance_max=imp_hi,
            timeline_capacity=int(_clamp(self.timeline_capacity, 1, 10_000, 40)),
            sw_threshold_z=int(_clamp(self.sw_threshold_z, *THRESHOLD_RANGE, 65)),
            volume_db=int(_clamp(self.volume_db, *VOLUME_RANGE, 55)),
            algorithm=algorithm,
            latency_estimate_ms=int(_clamp(self.latency_estimate_ms, 0, 10_000, 120)),
            latency_floor_ms=int(_clamp(self.latency_floor_ms, 0, 10_000, 80)),
            battery_pct=int(_clamp(self.battery_pct, *BATTERY_RANGE, 78)),
            demo_mode=_coerce_bool(self.demo_mode, True),
            require_pairing_for_calibration=_coerce_bool(
                self.require_pairing_for_calibration, True
            ),
        )

    def sample_interval_ms(self) -> int:
        """Return the timer interval that corresponds to ``sample_rate_hz``."""
        hz = _clamp(self.sample_rate_hz, 1.0, 1000.0, 30.0)
        return max(1, int(round(1000.0 / hz)))


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`SoundAsleepConfig`."""
    return {f.name for f in fields(SoundAsleepConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the optional top-level ``session`` block into the root mapping."""
    if "session" in data and isinstance(data["session"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "session":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> SoundAsleepConfig:
    """Build :class:`SoundAsleepConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return SoundAsleepConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return SoundAsleepConfig(**payload).sanitized()


def load_config(path: str | Path | None = None) -> SoundAsleepConfig:
    """
    Load configuration from ``path`` (or ``$SOUNDASLEEP_CONFIG``).

    Missing files fall back to default :class:`SoundAsleepConfig`.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return SoundAsleepConfig()
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        return SoundAsleepConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = [
    "ALGORITHM_NAMES",
    "BATTERY_RANGE",
    "CONFIG_ENV_VAR",
    "THRESHOLD_RANGE",
    "VOLUME_RANGE",
    "SoundAsleepConfig",
    "config_from_mapping",
    "load_config",
]
