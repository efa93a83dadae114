"""
Simulation ticker.

Drives ForceSimulation.tick() from the Qt event loop at frame rate, so
the staged force timers and hover timers interleave with the engine.
"""

from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from crexplorer_core.adapters.force_simulation import ForceSimulation


class SimulationTicker(QObject):
    """
    Ticks a ForceSimulation while it is hot.

    Signals:
        ticked(): Emitted after every engine step
        stopped(): Emitted when the engine reports it has stopped
    """

    ticked = pyqtSignal()
    stopped = pyqtSignal()

    def __init__(
        self,
        simulation: ForceSimulation,
        interval_ms: int = 16,
        parent: Optional[QObject] = None,
    ):
        """
        Initialize the ticker.

        Args:
            simulation: Engine to drive
            interval_ms: Time between steps
            parent: Optional parent QObject
        """
        super().__init__(parent)
        self.simulation = simulation
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        """Start stepping (keeps polling so a reheat restarts motion)."""
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def _on_timeout(self) -> None:
        if not self.simulation.is_running:
            return
        still_running = self.simulation.tick()
        self.ticked.emit()
        if not still_running:
            self.stopped.emit()
