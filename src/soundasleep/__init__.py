"""Sound Asleep demo console.

A simulated closed-loop acoustic stimulation console: a synthetic EEG trace,
per-channel impedance badges, device/session controls and an event log.
:mod:`soundasleep.core` holds the Qt-free buffers, timeline and scheduler;
:mod:`soundasleep.gui` drives them from the Qt event loop.
"""

__version__ = "0.1.0"
