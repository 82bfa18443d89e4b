import pathlib
import sys
import unittest
from datetime import datetime

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from soundasleep.core.timeline import EventTimeline  # noqa: E402


def _fixed_clock():
    return datetime(2024, 3, 1, 22, 15, 7)


class EventTimelineTest(unittest.TestCase):
    def test_append_prepends_with_formatted_time(self):
        timeline = EventTimeline(clock=_fixed_clock)
        record = timeline.append("Headband paired via BLE.")
        self.assertEqual(record.timestamp, "22:15:07")
        self.assertEqual(record.display(), "22:15:07  Headband paired via BLE.")
        self.assertIs(timeline[0], record)

    def test_newest_first_with_identical_timestamps(self):
        timeline = EventTimeline(clock=_fixed_clock)
        for message in ("first", "second", "third"):
            timeline.append(message)
        self.assertEqual([r.message for r in timeline], ["third", "second", "first"])

    def test_capacity_drops_oldest(self):
        timeline = EventTimeline(40, clock=_fixed_clock)
        for idx in range(41):
            timeline.append(f"event {idx}")
        messages = [r.message for r in timeline.snapshot()]
        self.assertEqual(len(timeline), 40)
        self.assertNotIn("event 0", messages)
        self.assertEqual(messages[0], "event 40")
        self.assertEqual(messages[-1], "event 1")

    def test_length_never_exceeds_capacity(self):
        timeline = EventTimeline(3, clock=_fixed_clock)
        for idx in range(10):
            timeline.append(str(idx))
            self.assertLessEqual(len(timeline), 3)
            self.assertEqual(timeline.latest().message, str(idx))

    def test_records_are_immutable(self):
        timeline = EventTimeline(clock=_fixed_clock)
        record = timeline.append("x")
        with self.assertRaises(AttributeError):
            record.message = "y"

    def test_rejects_non_positive_capacity(self):
        with self.assertRaises(ValueError):
            EventTimeline(0)


if __name__ == "__main__":
    unittest.main()
