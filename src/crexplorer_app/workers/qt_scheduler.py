"""
QTimer-backed scheduler.

Delayed callbacks run on the Qt event loop thread, so focus and
staged-force updates never race with UI callbacks.
"""

from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer

from crexplorer_core.ports.scheduler_port import SchedulerPort, TimerHandle


class QtTimerHandle(TimerHandle):
    """A single-shot QTimer that can be stopped before it fires."""

    def __init__(self, timer: QTimer):
        self._timer = timer
        self._done = False
        timer.timeout.connect(self._finish)

    def _finish(self) -> None:
        self._done = True
        self._timer.deleteLater()

    def cancel(self) -> None:
        if self._done:
            return
        self._timer.stop()
        self._finish()

    @property
    def active(self) -> bool:
        return not self._done and self._timer.isActive()


class QtScheduler(SchedulerPort):
    """Schedules callbacks with single-shot QTimers."""

    def __init__(self, parent: Optional[QObject] = None):
        """
        Initialize the scheduler.

        Args:
            parent: Owner of the created timers
        """
        self._parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")

        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.timeout.connect(callback)
        handle = QtTimerHandle(timer)
        timer.start(delay_ms)
        return handle
