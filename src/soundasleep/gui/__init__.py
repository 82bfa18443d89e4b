"""Desktop GUI implementation built with PySide6/Qt and pyqtgraph.

:mod:`gui.session_driver` owns the Qt timers that tick the sample buffer and
fire pending acknowledgements; :mod:`gui.main_window` renders the session
snapshots. Session state itself lives in :mod:`soundasleep.core`.
"""
