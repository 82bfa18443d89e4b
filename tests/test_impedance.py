import pathlib
import sys
import unittest

import numpy as np

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from soundasleep.core.impedance import ImpedanceSampler  # noqa: E402
from soundasleep.core.models import impedance_grade  # noqa: E402


class ImpedanceSamplerTest(unittest.TestCase):
    def test_sample_returns_one_reading_per_channel_in_range(self):
        sampler = ImpedanceSampler(np.random.default_rng(3))
        readings = sampler.sample(8, trigger_key=0)
        self.assertEqual([r.channel_index for r in readings], list(range(8)))
        for reading in readings:
            self.assertGreaterEqual(reading.value, 15.0)
            self.assertLessEqual(reading.value, 95.0)

    def test_same_trigger_returns_cached_vector(self):
        sampler = ImpedanceSampler(np.random.default_rng(3))
        first = sampler.sample(8, trigger_key="a")
        self.assertIs(sampler.sample(8, trigger_key="a"), first)

    def test_new_trigger_replaces_vector(self):
        sampler = ImpedanceSampler(np.random.default_rng(3))
        first = sampler.sample(8, trigger_key=1)
        second = sampler.sample(8, trigger_key=2)
        self.assertIsNot(second, first)
        self.assertNotEqual([r.value for r in first], [r.value for r in second])
        self.assertIs(sampler.current(), second)

    def test_channel_count_change_recomputes(self):
        sampler = ImpedanceSampler(np.random.default_rng(3))
        sampler.sample(8, trigger_key=1)
        self.assertEqual(len(sampler.sample(4, trigger_key=1)), 4)

    def test_rejects_range_outside_percentage(self):
        with self.assertRaises(ValueError):
            ImpedanceSampler(value_range=(10.0, 150.0))

    def test_impedance_grades(self):
        self.assertEqual(impedance_grade(10.0), "good")
        self.assertEqual(impedance_grade(25.0), "fair")
        self.assertEqual(impedance_grade(59.9), "fair")
        self.assertEqual(impedance_grade(60.0), "poor")


if __name__ == "__main__":
    unittest.main()
