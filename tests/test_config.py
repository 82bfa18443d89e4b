import os
import pathlib
import sys
import tempfile
import unittest
from unittest import mock

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from soundasleep.config import (  # noqa: E402
    CONFIG_ENV_VAR,
    SoundAsleepConfig,
    config_from_mapping,
    load_config,
)


class ConfigTest(unittest.TestCase):
    def test_defaults(self):
        cfg = SoundAsleepConfig()
        self.assertEqual(cfg.sample_capacity, 256)
        self.assertEqual(cfg.sample_interval_ms(), 33)
        self.assertEqual(cfg.timeline_capacity, 40)
        self.assertEqual(cfg.channel_count, 8)

    def test_mapping_flattens_session_block_and_ignores_unknown(self):
        cfg = config_from_mapping(
            {
                "sample_rate_hz": 25,
                "unknown": 1,
                "session": {"volume_db": 60, "algorithm": "cosleep"},
            }
        )
        self.assertEqual(cfg.sample_rate_hz, 25.0)
        self.assertEqual(cfg.volume_db, 60)
        self.assertEqual(cfg.algorithm, "CoSleep")

    def test_sanitized_clamps_out_of_range_values(self):
        cfg = config_from_mapping(
            {
                "sw_threshold_z": 999,
                "volume_db": 5,
                "battery_pct": -3,
                "sample_capacity": 0,
                "algorithm": "nope",
            }
        )
        self.assertEqual(cfg.sw_threshold_z, 90)
        self.assertEqual(cfg.volume_db, 30)
        self.assertEqual(cfg.battery_pct, 0)
        self.assertEqual(cfg.sample_capacity, 2)
        self.assertEqual(cfg.algorithm, "YASA")

    def test_boolean_settings_accept_yaml_strings(self):
        cfg = config_from_mapping(
            {"session": {"demo_mode": "false", "require_pairing_for_calibration": "No"}}
        )
        self.assertIs(cfg.demo_mode, False)
        self.assertIs(cfg.require_pairing_for_calibration, False)

        cfg = config_from_mapping({"demo_mode": "on", "require_pairing_for_calibration": 0})
        self.assertIs(cfg.demo_mode, True)
        self.assertIs(cfg.require_pairing_for_calibration, False)

    def test_unrecognized_boolean_falls_back_to_default(self):
        cfg = config_from_mapping({"demo_mode": "maybe", "require_pairing_for_calibration": [1]})
        self.assertIs(cfg.demo_mode, True)
        self.assertIs(cfg.require_pairing_for_calibration, True)

    def test_load_config_missing_file_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = load_config(pathlib.Path(tmpdir) / "missing.yaml")
        self.assertEqual(cfg, SoundAsleepConfig())

    def test_load_config_reads_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "soundasleep.yaml"
            path.write_text("timeline_capacity: 10\nsession:\n  sw_threshold_z: 70\n", encoding="utf-8")
            cfg = load_config(path)
        self.assertEqual(cfg.timeline_capacity, 10)
        self.assertEqual(cfg.sw_threshold_z, 70)

    def test_load_config_rejects_non_mapping(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "bad.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)

    def test_load_config_from_environment(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "env.yaml"
            path.write_text("channel_count: 4\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: str(path)}):
                cfg = load_config()
        self.assertEqual(cfg.channel_count, 4)

    def test_bundled_defaults_file_matches_builtin_defaults(self):
        path = SRC / "soundasleep" / "config" / "defaults.yaml"
        self.assertEqual(load_config(path), SoundAsleepConfig())


if __name__ == "__main__":
    unittest.main()
