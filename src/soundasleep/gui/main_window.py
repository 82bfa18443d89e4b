"""Main window for the Sound Asleep demo console."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import numpy as np
import pyqtgraph as pg

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from ..config.runtime import THRESHOLD_RANGE, VOLUME_RANGE
from ..core.models import Algorithm, ImpedanceReading, SessionConfig
from ..core.sample_buffer import DISPLAY_RANGE
from .session_driver import SessionDriver

logger = logging.getLogger(__name__)

_GRADE_COLOURS: Dict[str, str] = {
    "good": "#059669",
    "fair": "#f59e0b",
    "poor": "#e11d48",
}


class ImpedanceBadge(QLabel):
    """Per-channel ``Ch<n> <value> kΩ`` label coloured by contact quality."""

    def __init__(self, channel_index: int, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._channel_index = channel_index
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumWidth(80)
        self.set_reading(None)

    def set_reading(self, reading: ImpedanceReading | None) -> None:
        name = f"Ch{self._channel_index + 1}"
        if reading is None:
            self.setText(f"{name}  -- kΩ")
            self.setStyleSheet("")
            return
        colour = _GRADE_COLOURS[reading.grade]
        self.setText(f"{name}  {reading.value:.0f} kΩ")
        self.setStyleSheet(
            f"background-color: {colour}; color: white; border-radius: 6px; padding: 2px 6px;"
        )


class MainWindow(QMainWindow):
    """
    Renders session snapshots and forwards operator input to the driver.

    The window never touches the core components directly: it reads
    ``current_*`` snapshots when the driver signals a change, and every
    control is wired to a :class:`SessionDriver` slot.
    """

    def __init__(self, driver: SessionDriver) -> None:
        super().__init__()
        self.setWindowTitle("Sound Asleep · Closed-loop SWS")
        self._driver = driver
        self._controller = driver.controller

        self._build_ui()
        self._connect_signals()

        self._render_config(self._controller.current_config())
        self._render_samples()
        self._render_events()

    # ------------------------------------------------------------------ layout
    def _build_ui(self) -> None:
        container = QWidget()
        root = QVBoxLayout(container)

        header = QHBoxLayout()
        title = QLabel("<b>Sound Asleep</b>  ·  Closed-loop SWS")
        header.addWidget(title, stretch=1)
        header.addWidget(QLabel("Battery"))
        self._battery_bar = QProgressBar()
        self._battery_bar.setRange(0, 100)
        self._battery_bar.setFixedWidth(120)
        header.addWidget(self._battery_bar)
        root.addLayout(header)

        top = QHBoxLayout()
        top.addWidget(self._build_session_panel(), stretch=1)
        top.addWidget(self._build_eeg_panel(), stretch=2)
        root.addLayout(top, stretch=2)

        bottom = QHBoxLayout()
        bottom.addWidget(self._build_summary_panel(), stretch=2)
        bottom.addWidget(self._build_log_panel(), stretch=1)
        root.addLayout(bottom, stretch=1)

        self.setCentralWidget(container)

    def _build_session_panel(self) -> QGroupBox:
        box = QGroupBox(self.tr("Device && Session"))
        layout = QVBoxLayout(box)

        device_row = QHBoxLayout()
        self._status_label = QLabel()
        device_row.addWidget(self._status_label, stretch=1)
        self._pair_button = QPushButton(self.tr("Pair"))
        device_row.addWidget(self._pair_button)
        layout.addLayout(device_row)

        grid = QGridLayout()
        grid.addWidget(QLabel(self.tr("Algorithm")), 0, 0)
        self._algorithm_combo = QComboBox()
        for algorithm in Algorithm:
            self._algorithm_combo.addItem(algorithm.label, userData=algorithm.value)
        grid.addWidget(self._algorithm_combo, 0, 1)
        self._demo_check = QCheckBox(self.tr("Mock demo mode (prerecorded data)"))
        grid.addWidget(self._demo_check, 1, 0, 1, 2)
        layout.addLayout(grid)

        stim_box = QGroupBox(self.tr("Stimulation"))
        stim_layout = QVBoxLayout(stim_box)
        self._stim_check = QCheckBox(self.tr("Enabled"))
        stim_layout.addWidget(self._stim_check)

        self._volume_slider = self._make_slider(*VOLUME_RANGE)
        self._volume_label = QLabel()
        stim_layout.addWidget(QLabel(self.tr("Volume (target 55 dB)")))
        stim_layout.addWidget(self._volume_slider)
        stim_layout.addWidget(self._volume_label)

        self._threshold_slider = self._make_slider(*THRESHOLD_RANGE)
        self._threshold_label = QLabel()
        stim_layout.addWidget(QLabel(self.tr("Slow-wave threshold")))
        stim_layout.addWidget(self._threshold_slider)
        stim_layout.addWidget(self._threshold_label)

        buttons = QHBoxLayout()
        self._burst_button = QPushButton(self.tr("Pink-noise test"))
        self._calibrate_button = QPushButton(self.tr("Calibrate latency"))
        buttons.addWidget(self._burst_button)
        buttons.addWidget(self._calibrate_button)
        stim_layout.addLayout(buttons)

        self._latency_label = QLabel()
        stim_layout.addWidget(self._latency_label)
        layout.addWidget(stim_box)
        layout.addStretch(1)
        return box

    def _build_eeg_panel(self) -> QGroupBox:
        box = QGroupBox(self.tr("Live EEG (C3-A2)"))
        layout = QVBoxLayout(box)
        layout.addWidget(QLabel(self.tr("Band-passed 0.1-40 Hz, 250 Hz sampling (display decimated).")))

        self._plot = pg.PlotWidget()
        self._plot.setMenuEnabled(False)
        self._plot.hideButtons()
        self._plot.hideAxis("bottom")
        self._plot.hideAxis("left")
        self._plot.setYRange(*DISPLAY_RANGE, padding=0.0)
        self._plot.enableAutoRange(x=False, y=False)
        self._curve = self._plot.plot([], [], pen=pg.mkPen(width=2))
        layout.addWidget(self._plot, stretch=1)

        grid = QGridLayout()
        self._badges: List[ImpedanceBadge] = []
        per_row = 4
        for idx in range(self._controller.settings.channel_count):
            badge = ImpedanceBadge(idx)
            grid.addWidget(badge, idx // per_row, idx % per_row)
            self._badges.append(badge)
        layout.addLayout(grid)
        return box

    def _build_summary_panel(self) -> QGroupBox:
        box = QGroupBox(self.tr("Sleep Staging && Events"))
        layout = QVBoxLayout(box)
        tiles = QHBoxLayout()
        self._slow_wave_label = QLabel()
        self._bursts_label = QLabel()
        self._phase_error_label = QLabel()
        for caption, label in (
            (self.tr("Detected slow-waves"), self._slow_wave_label),
            (self.tr("Stim bursts issued"), self._bursts_label),
            (self.tr("Avg phase error"), self._phase_error_label),
        ):
            tile = QVBoxLayout()
            tile.addWidget(QLabel(caption))
            label.setStyleSheet("font-size: 20px; font-weight: 600;")
            tile.addWidget(label)
            tiles.addLayout(tile)
        layout.addLayout(tiles)
        notes = QLabel(
            self.tr(
                "Notes: Stimulation auto-pauses on arousal flags; UI shows ACK within "
                "100 ms of playback start. BLE dropouts up to 200 ms are tolerated by gap-filling."
            )
        )
        notes.setWordWrap(True)
        layout.addWidget(notes)
        return box

    def _build_log_panel(self) -> QGroupBox:
        box = QGroupBox(self.tr("Event Log (most recent first)"))
        layout = QVBoxLayout(box)
        self._log_list = QListWidget()
        layout.addWidget(self._log_list)
        return box

    @staticmethod
    def _make_slider(lo: int, hi: int) -> QSlider:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(lo, hi)
        slider.setSingleStep(1)
        return slider

    # ----------------------------------------------------------------- wiring
    def _connect_signals(self) -> None:
        driver = self._driver
        self._pair_button.clicked.connect(driver.pair)
        self._burst_button.clicked.connect(driver.trigger_test_burst)
        self._calibrate_button.clicked.connect(driver.calibrate)
        self._stim_check.toggled.connect(driver.set_stimulation)
        self._demo_check.toggled.connect(driver.set_demo_mode)
        self._volume_slider.valueChanged.connect(driver.set_volume)
        self._threshold_slider.valueChanged.connect(driver.set_threshold)
        self._algorithm_combo.currentIndexChanged.connect(self._on_algorithm_index_changed)

        driver.samples_updated.connect(self._render_samples)
        driver.events_changed.connect(self._render_events)
        driver.config_changed.connect(self._render_config)

    @Slot(int)
    def _on_algorithm_index_changed(self, index: int) -> None:
        name = self._algorithm_combo.itemData(index)
        if name:
            self._driver.set_algorithm(str(name))

    # -------------------------------------------------------------- rendering
    @Slot()
    def _render_samples(self) -> None:
        values = self._controller.current_values()
        self._curve.setData(np.arange(values.shape[0]), values)
        self._render_impedances(self._controller.current_impedances())

    def _render_impedances(self, readings: Sequence[ImpedanceReading]) -> None:
        for badge, reading in zip(self._badges, readings):
            badge.set_reading(reading)

    @Slot()
    def _render_events(self) -> None:
        self._log_list.clear()
        self._log_list.addItems([record.display() for record in self._controller.current_events()])

    @Slot(object)
    def _render_config(self, config: SessionConfig) -> None:
        widgets = (
            self._stim_check,
            self._demo_check,
            self._volume_slider,
            self._threshold_slider,
            self._algorithm_combo,
        )
        blocked = [widget.blockSignals(True) for widget in widgets]
        try:
            self._stim_check.setChecked(config.stimulation_enabled)
            self._demo_check.setChecked(config.demo_mode)
            self._volume_slider.setValue(config.volume_db)
            self._threshold_slider.setValue(config.sw_threshold_z)
            idx = self._algorithm_combo.findData(config.algorithm.value)
            if idx >= 0:
                self._algorithm_combo.setCurrentIndex(idx)
        finally:
            for widget, was_blocked in zip(widgets, blocked):
                widget.blockSignals(was_blocked)

        paired = config.paired
        self._status_label.setText(
            self.tr("EEG Headband: Connected") if paired else self.tr("EEG Headband: Not connected")
        )
        self._pair_button.setEnabled(not paired)
        self._pair_button.setText(self.tr("Connected") if paired else self.tr("Pair"))
        self._volume_label.setText(f"{config.volume_db} dB")
        self._threshold_label.setText(f"z-score ≥ {config.sw_threshold_z}")
        self._latency_label.setText(f"Latency estimate: {config.latency_estimate_ms} ms")
        self._battery_bar.setValue(config.battery_pct)
        self._battery_bar.setFormat(f"{config.battery_pct}%")

        summary = self._controller.summary()
        self._slow_wave_label.setText(str(summary.detected_slow_waves))
        self._bursts_label.setText(str(summary.stim_bursts))
        self._phase_error_label.setText(f"{summary.avg_phase_error_ms} ms")

    # -------------------------------------------------------------- lifecycle
    def closeEvent(self, event: QCloseEvent) -> None:
        try:
            self._driver.stop()
        except Exception:  # pragma: no cover - best-effort shutdown
            logger.exception("Failed to stop session on close")
        super().closeEvent(event)
