"""One-shot deferred acknowledgements processed by the event loop."""

from __future__ import annotations

import heapq
import itertools
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .errors import TimerSchedulingError

logger = logging.getLogger(__name__)

AckCallback = Callable[[], None]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(eq=False)
class PendingAck:
    """Cancellation handle returned by :meth:`LatencyGatedAck.schedule`."""

    deadline_ms: float
    order: int
    callback: AckCallback = field(repr=False)
    cancelled: bool = False
    fired: bool = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """Prevent the callback from firing. Returns ``False`` if it already ran."""
        if self.fired:
            return False
        self.cancelled = True
        return True


class LatencyGatedAck:
    """
    Min-heap of one-shot callbacks keyed on ``(deadline, scheduling order)``.

    Nothing runs on its own: the owning event loop calls :meth:`run_due`
    when :meth:`next_deadline_ms` elapses (the Qt driver arms a single-shot
    ``QTimer`` for it, tests advance a fake clock). Callbacks therefore fire
    in deadline order, ties in the order they were scheduled.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or monotonic_ms
        self._heap: List[Tuple[float, int, PendingAck]] = []
        self._counter = itertools.count()
        self._closed = False

    def now_ms(self) -> float:
        return float(self._clock())

    def schedule(self, delay_ms: float, on_fire: AckCallback) -> Optional[PendingAck]:
        """
        Register ``on_fire`` to run once, no earlier than ``delay_ms`` from now.

        Negative or non-finite delays are rejected: the problem is logged and
        ``None`` is returned without registering anything.
        """
        try:
            delay = self._validate_delay(delay_ms)
        except TimerSchedulingError as exc:
            logger.warning("Acknowledgement not scheduled: %s", exc)
            return None
        if self._closed:
            logger.debug("Scheduler closed; dropping acknowledgement")
            return None
        pending = PendingAck(
            deadline_ms=self.now_ms() + delay,
            order=next(self._counter),
            callback=on_fire,
        )
        heapq.heappush(self._heap, (pending.deadline_ms, pending.order, pending))
        logger.debug("Acknowledgement scheduled in %.1f ms", delay)
        return pending

    @staticmethod
    def _validate_delay(delay_ms: float) -> float:
        try:
            delay = float(delay_ms)
        except (TypeError, ValueError) as exc:
            raise TimerSchedulingError(f"delay {delay_ms!r} is not a number") from exc
        if not math.isfinite(delay):
            raise TimerSchedulingError(f"delay {delay!r} is not finite")
        if delay < 0.0:
            raise TimerSchedulingError(f"delay {delay!r} ms is negative")
        return delay

    def run_due(self, now_ms: float | None = None) -> int:
        """Fire every callback whose deadline has elapsed; return how many ran."""
        now = self.now_ms() if now_ms is None else float(now_ms)
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, pending = heapq.heappop(self._heap)
            if not pending.active:
                continue
            pending.fired = True
            fired += 1
            try:
                pending.callback()
            except Exception:
                logger.exception("Acknowledgement callback raised")
        return fired

    def next_deadline_ms(self) -> float | None:
        self._discard_inactive()
        if not self._heap:
            return None
        return self._heap[0][0]

    def cancel_all(self) -> int:
        """Cancel every pending callback; return how many were cancelled."""
        cancelled = 0
        for _, _, pending in self._heap:
            if pending.cancel():
                cancelled += 1
        self._heap.clear()
        if cancelled:
            logger.debug("Cancelled %d pending acknowledgement(s)", cancelled)
        return cancelled

    def close(self) -> None:
        """Cancel everything and refuse further scheduling."""
        self.cancel_all()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _discard_inactive(self) -> None:
        while self._heap and not self._heap[0][2].active:
            heapq.heappop(self._heap)

    def __len__(self) -> int:
        return sum(1 for _, _, pending in self._heap if pending.active)


__all__ = ["AckCallback", "LatencyGatedAck", "PendingAck", "monotonic_ms"]
