import math
import pathlib
import sys
import unittest

import numpy as np

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from soundasleep.core.sample_buffer import SampleBuffer, SyntheticEeg  # noqa: E402


class SampleBufferTest(unittest.TestCase):
    def test_initialize_prefills_capacity(self):
        buf = SampleBuffer.initialize(4, 0.0)
        self.assertEqual(len(buf), 4)
        self.assertEqual([s.value for s in buf.snapshot()], [0.0, 0.0, 0.0, 0.0])
        self.assertEqual([s.sequence for s in buf.snapshot()], [0, 1, 2, 3])

    def test_tick_evicts_oldest_and_appends(self):
        buf = SampleBuffer.initialize(4, 0.0)
        sample = buf.tick(lambda _buf: 7)

        self.assertEqual(sample.sequence, 4)
        self.assertEqual(sample.value, 7.0)
        self.assertEqual([s.value for s in buf.snapshot()], [0.0, 0.0, 0.0, 7.0])
        self.assertEqual([s.sequence for s in buf.snapshot()], [1, 2, 3, 4])

    def test_length_and_sequences_hold_over_many_ticks(self):
        buf = SampleBuffer(16)
        gen = SyntheticEeg(np.random.default_rng(1))
        last_seq = buf.latest().sequence
        for _ in range(100):
            sample = buf.tick(gen)
            self.assertIsNotNone(sample)
            self.assertEqual(len(buf), 16)
            self.assertEqual(sample.sequence, last_seq + 1)
            last_seq = sample.sequence
            sequences = buf.sequences()
            self.assertTrue(np.all(np.diff(sequences) == 1))
        self.assertEqual(buf.first_sequence, 100)
        self.assertEqual(buf.latest().sequence, 115)

    def test_values_stay_in_display_range(self):
        buf = SampleBuffer(8)
        gen = SyntheticEeg(np.random.default_rng(7))
        for _ in range(64):
            buf.tick(gen)
        values = buf.values()
        self.assertTrue(np.all(values >= -100.0))
        self.assertTrue(np.all(values <= 100.0))

    def test_out_of_range_values_are_clamped(self):
        buf = SampleBuffer(3)
        self.assertEqual(buf.tick(lambda _b: 500.0).value, 100.0)
        self.assertEqual(buf.tick(lambda _b: -250.0).value, -100.0)

    def test_non_finite_value_skips_tick(self):
        buf = SampleBuffer(3)
        buf.tick(lambda _b: 5.0)
        before = buf.snapshot()
        with self.assertLogs("soundasleep.core.sample_buffer", level="WARNING"):
            self.assertIsNone(buf.tick(lambda _b: math.nan))
        with self.assertLogs("soundasleep.core.sample_buffer", level="WARNING"):
            self.assertIsNone(buf.tick(lambda _b: math.inf))
        self.assertEqual(buf.snapshot(), before)
        self.assertEqual(buf.next_sequence, 4)

    def test_failing_generator_skips_tick(self):
        def broken(_buf):
            raise RuntimeError("sensor offline")

        buf = SampleBuffer(3)
        before = buf.snapshot()
        with self.assertLogs("soundasleep.core.sample_buffer", level="ERROR"):
            self.assertIsNone(buf.tick(broken))
        self.assertEqual(buf.snapshot(), before)

    def test_snapshot_is_stable_without_tick(self):
        buf = SampleBuffer(5)
        buf.tick(lambda _b: 1.5)
        self.assertEqual(buf.snapshot(), buf.snapshot())

    def test_indexing_matches_snapshot(self):
        buf = SampleBuffer(3)
        for value in (1.0, 2.0, 3.0, 4.0):
            buf.tick(lambda _b, v=value: v)
        self.assertEqual(buf[0], buf.snapshot()[0])
        self.assertEqual(buf[-1].value, 4.0)
        self.assertEqual(buf.oldest().value, 2.0)
        with self.assertRaises(IndexError):
            buf[3]

    def test_rejects_invalid_construction(self):
        with self.assertRaises(ValueError):
            SampleBuffer(0)
        with self.assertRaises(ValueError):
            SampleBuffer(4, math.nan)


if __name__ == "__main__":
    unittest.main()
