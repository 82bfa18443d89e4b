"""Qt application entry point for the Sound Asleep demo console.

This module wires up argument parsing and logging, builds the
:class:`~soundasleep.gui.session_driver.SessionDriver` and
:class:`~soundasleep.gui.main_window.MainWindow`, and starts the Qt event
loop. ``python main.py``, ``python -m soundasleep.gui.application`` and the
``soundasleep`` console script all flow through ``main()`` here.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Tuple

import numpy as np
import pyqtgraph as pg

from PySide6.QtCore import QLoggingCategory
from PySide6.QtWidgets import QApplication

from ..config.runtime import SoundAsleepConfig, load_config
from ..core.session import SessionController
from .main_window import MainWindow
from .session_driver import SessionDriver

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sound Asleep demo console")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML settings file (default: $SOUNDASLEEP_CONFIG, else built-in defaults)",
    )
    parser.add_argument(
        "--rate-hz",
        type=float,
        default=None,
        help="Synthetic EEG sample rate in Hz (default: 30)",
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="Number of samples kept in the live trace (default: 256)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the synthetic signal / impedance generator",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
        help="Console log level (default: INFO)",
    )
    return parser


def _parse_cli_args(
    argv: list[str],
) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def config_from_args(args: argparse.Namespace) -> SoundAsleepConfig:
    """Load the YAML config and apply command-line overrides on top."""
    config = load_config(args.config)
    overrides = {}
    if args.rate_hz is not None:
        overrides["sample_rate_hz"] = float(args.rate_hz)
    if args.capacity is not None:
        overrides["sample_capacity"] = int(args.capacity)
    if overrides:
        config = dataclasses.replace(config, **overrides).sanitized()
    return config


def create_app(
    argv: list[str] | None = None,
    *,
    config: SoundAsleepConfig | None = None,
    seed: int | None = None,
) -> Tuple[QApplication, MainWindow, SessionDriver]:
    """
    Create the QApplication, the session driver and the main window.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window, already wired to ``driver``.
    driver:
        The (not yet started) session driver.
    """
    qt_args = argv if argv is not None else sys.argv
    app = QApplication.instance() or QApplication(qt_args)

    # Suppress noisy QObject::connect warnings from QStyleHints and similar internals
    QLoggingCategory.setFilterRules("qt.core.qobject.connect=false")
    pg.setConfigOptions(antialias=True, background="w", foreground="k")

    controller = SessionController(config, rng=np.random.default_rng(seed))
    driver = SessionDriver(controller)
    window = MainWindow(driver)
    driver.setParent(window)
    return app, window, driver


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    configure_logging(args.log_level)
    config = config_from_args(args)
    logger.info("Starting Sound Asleep with %s", config)

    app, win, driver = create_app(qt_argv, config=config, seed=args.seed)
    app.aboutToQuit.connect(driver.stop)
    win.resize(1200, 760)
    win.show()
    driver.start()
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
