"""
Scheduler port interface.

Single-shot, cancellable delayed callbacks. The app layer backs this with
QTimer; tests use a manual clock.
"""

from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    """Handle to a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback. No-op if it already fired."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        """True while the callback is still waiting to fire."""
        pass


class SchedulerPort(ABC):
    """Abstract interface for scheduling delayed callbacks."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay_ms milliseconds."""
        pass
