"""
Qt event-loop workers for crexplorer.

Timers that run on the UI thread: the scheduler behind hover and staged
force timers, and the simulation ticker.
"""

from .qt_scheduler import QtScheduler, QtTimerHandle
from .simulation_ticker import SimulationTicker

__all__ = [
    "QtScheduler",
    "QtTimerHandle",
    "SimulationTicker",
]
