"""
Base ViewModel class for the crexplorer MVVM layer.

ViewModels expose state through signals and own the delayed callbacks
they schedule, so replacing or discarding one never leaves a timer
firing against stale state.
"""

from typing import Any, Callable, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from crexplorer_core.ports.scheduler_port import SchedulerPort, TimerHandle


class BaseViewModel(QObject):
    """
    Base class for all ViewModels.

    Pattern:
    - Properties with signals on change
    - Commands as methods
    - No widget references (UI-agnostic)
    - Timers go through _call_later() and are cancelled together
    """

    def __init__(self, scheduler: SchedulerPort, parent: Optional[QObject] = None):
        """
        Initialize the ViewModel.

        Args:
            scheduler: Source of cancellable single-shot timers
            parent: Optional parent QObject for Qt memory management
        """
        super().__init__(parent)
        self._scheduler = scheduler
        self._timers: List[TimerHandle] = []

    @property
    def has_pending_timers(self) -> bool:
        return any(t.active for t in self._timers)

    def _call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Schedule a tracked callback."""
        self._timers = [t for t in self._timers if t.active]
        handle = self._scheduler.call_later(delay_ms, callback)
        self._timers.append(handle)
        return handle

    def _cancel_timers(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers = []

    def _notify_change(self, signal: pyqtSignal, *args: Any) -> None:
        signal.emit(*args)
