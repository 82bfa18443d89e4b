"""Qt timers that drive a :class:`SessionController` from the event loop."""

from __future__ import annotations

import logging
import math
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Qt, Signal, Slot

from ..core.models import EventRecord
from ..core.session import SessionController

logger = logging.getLogger(__name__)


class SessionDriver(QObject):
    """
    Non-visual owner of the session's periodic and one-shot work.

    - A ``PreciseTimer`` ticks the sample buffer at ``sample_rate_hz``.
    - A single-shot timer is re-armed for the ack scheduler's earliest
      deadline after every action and every drain.

    :meth:`stop` halts both timers and cancels every pending
    acknowledgement, so nothing mutates the session after teardown.
    """

    samples_updated = Signal()
    events_changed = Signal()
    config_changed = Signal(object)

    def __init__(self, controller: SessionController, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._event_count = len(controller.current_events())
        self._last_event = self._latest_event()

        self._sample_timer = QTimer(self)
        self._sample_timer.setTimerType(Qt.PreciseTimer)
        self._sample_timer.setInterval(controller.settings.sample_interval_ms())
        self._sample_timer.timeout.connect(self._on_sample_tick)

        self._ack_timer = QTimer(self)
        self._ack_timer.setSingleShot(True)
        self._ack_timer.setTimerType(Qt.PreciseTimer)
        self._ack_timer.timeout.connect(self._on_ack_due)

    @property
    def controller(self) -> SessionController:
        return self._controller

    def is_running(self) -> bool:
        return self._sample_timer.isActive()

    def is_ack_armed(self) -> bool:
        return self._ack_timer.isActive()

    # ------------------------------------------------------------- lifecycle
    def start(self) -> None:
        if self._controller.disposed:
            logger.warning("SessionDriver: cannot start a disposed session")
            return
        if self._sample_timer.isActive():
            return
        self._sample_timer.start()
        self._rearm_ack_timer()
        logger.info(
            "SessionDriver: streaming at %.1f Hz (%d ms interval)",
            self._controller.settings.sample_rate_hz,
            self._sample_timer.interval(),
        )

    def stop(self) -> None:
        self._sample_timer.stop()
        self._ack_timer.stop()
        self._controller.dispose()
        logger.info("SessionDriver: stopped")

    # --------------------------------------------------------------- actions
    @Slot()
    def pair(self) -> None:
        self._controller.pair()
        self._after_action()

    @Slot()
    def calibrate(self) -> None:
        self._controller.calibrate()
        self._after_action()

    @Slot()
    def trigger_test_burst(self) -> None:
        self._controller.trigger_test_burst()
        self._after_action()

    @Slot(bool)
    def set_stimulation(self, enabled: bool) -> None:
        self._controller.set_stimulation(enabled)
        self._after_action()

    @Slot(bool)
    def set_demo_mode(self, enabled: bool) -> None:
        self._controller.set_demo_mode(enabled)
        self._after_action()

    @Slot(int)
    def set_threshold(self, z: int) -> None:
        self._controller.set_threshold(z)
        self._after_action()

    @Slot(int)
    def set_volume(self, db: int) -> None:
        self._controller.set_volume(db)
        self._after_action()

    @Slot(str)
    def set_algorithm(self, name: str) -> None:
        self._controller.set_algorithm(name)
        self._after_action()

    # ---------------------------------------------------------------- timers
    @Slot()
    def _on_sample_tick(self) -> None:
        if self._controller.tick() is not None:
            self.samples_updated.emit()

    @Slot()
    def _on_ack_due(self) -> None:
        fired = self._controller.scheduler.run_due()
        if fired:
            self._emit_events_if_changed()
        self._rearm_ack_timer()

    def _rearm_ack_timer(self) -> None:
        scheduler = self._controller.scheduler
        deadline = scheduler.next_deadline_ms()
        if deadline is None or self._controller.disposed:
            self._ack_timer.stop()
            return
        remaining = max(0, int(math.ceil(deadline - scheduler.now_ms())))
        self._ack_timer.start(remaining)

    def _after_action(self) -> None:
        self.config_changed.emit(self._controller.current_config())
        self._emit_events_if_changed()
        self._rearm_ack_timer()

    def _latest_event(self) -> EventRecord | None:
        events = self._controller.current_events()
        return events[0] if events else None

    def _emit_events_if_changed(self) -> None:
        # Records are immutable, so identity of the newest entry tracks appends.
        latest = self._latest_event()
        count = len(self._controller.current_events())
        if latest is not self._last_event or count != self._event_count:
            self._last_event = latest
            self._event_count = count
            self.events_changed.emit()
