"""Bounded, most-recent-first session event log."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Callable, Deque, Iterator, Tuple

from .models import EventRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMELINE_CAPACITY = 40
TIME_FORMAT = "%H:%M:%S"


class EventTimeline:
    """
    Newest-first log of :class:`EventRecord` entries.

    Backed by a ``deque(maxlen=capacity)`` with new records added on the
    left, so the oldest entry drops off the right end in O(1).
    """

    def __init__(
        self,
        capacity: int = DEFAULT_TIMELINE_CAPACITY,
        *,
        clock: Callable[[], datetime] | None = None,
        time_format: str = TIME_FORMAT,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._records: Deque[EventRecord] = deque(maxlen=int(capacity))
        self._clock = clock or datetime.now
        self._time_format = time_format

    @property
    def capacity(self) -> int:
        return int(self._records.maxlen or 0)

    def append(self, message: str) -> EventRecord:
        record = EventRecord(
            timestamp=self._clock().strftime(self._time_format),
            message=str(message),
        )
        self._records.appendleft(record)
        logger.info("Event: %s", record.message)
        return record

    def snapshot(self) -> Tuple[EventRecord, ...]:
        return tuple(self._records)

    def latest(self) -> EventRecord | None:
        return self._records[0] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> EventRecord:
        return self._records[index]


__all__ = ["DEFAULT_TIMELINE_CAPACITY", "TIME_FORMAT", "EventTimeline"]
