"""
Shared fixtures for crexplorer unit tests.

Sample tree used throughout:

    C1 (CRE "Auth")
     ├─ Contains ──▶ ISO:1 (Standard) ── Linked To ──▶ C1   (cycle)
     ├─ Contains ──▶ ISO:2 (Standard)
     └─ Related ───▶ C2 (CRE "Crypto")
                      ├─ Linked To ──▶ NIST:A (Standard)
                      ├─ Linked To ──▶ ISO:1   (second path)
                      ├─ Linked To ──▶ T1 (Tool)
                      └─ SAME ───────▶ C1
"""

import heapq
import itertools
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from crexplorer_core.adapters.memory_tree import InMemoryTreeSource
from crexplorer_core.domain.models import Document, GraphPayload, Link
from crexplorer_core.ports.scheduler_port import SchedulerPort, TimerHandle
from crexplorer_core.ports.simulation_port import OrbitControls, SimulationPort


# -----------------------------------------------------------------------------
# Manual clock scheduler
# -----------------------------------------------------------------------------

class ManualTimer(TimerHandle):
    def __init__(self, due: int, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.fired


class ManualScheduler(SchedulerPort):
    """Scheduler driven by advance(ms) instead of wall time."""

    def __init__(self):
        self.now = 0
        self._queue: List[Tuple[int, int, ManualTimer]] = []
        self._seq = itertools.count()
        self.timers: List[ManualTimer] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        timer = ManualTimer(self.now + delay_ms, callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        self.timers.append(timer)
        return timer

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self.now = due
            if timer.active:
                timer.fired = True
                timer.callback()
        self.now = target

    @property
    def active_count(self) -> int:
        return sum(1 for t in self.timers if t.active)


# -----------------------------------------------------------------------------
# Recording simulation
# -----------------------------------------------------------------------------

class FakeSimulation(SimulationPort):
    """Records every call; assigns simple deterministic positions."""

    def __init__(self, fov: Optional[float] = 40.0, size=(1920, 1080), place_nodes: bool = True):
        self.payload = GraphPayload()
        self.charges: List[float] = []
        self.reheats = 0
        self.camera_moves = []
        self.fits = []
        self.refreshes = 0
        self.on_stop = None
        self._fov = fov
        self._size = size
        self._controls = OrbitControls()
        self.place_nodes = place_nodes

    def set_graph(self, payload: GraphPayload) -> None:
        self.payload = payload
        if self.place_nodes:
            for i, node in enumerate(payload.nodes):
                node.x, node.y, node.z = float(i * 10), float((i * 7) % 5), float(i)

    def set_charge_strength(self, strength: float) -> None:
        self.charges.append(strength)

    def reheat(self) -> None:
        self.reheats += 1

    def set_engine_stop_callback(self, callback) -> None:
        self.on_stop = callback

    def camera_position(self, position, look_at, duration_ms: int = 0) -> None:
        self.camera_moves.append((position, look_at, duration_ms))

    def camera_fov(self):
        return self._fov

    def viewport_size(self):
        return self._size

    def controls(self) -> OrbitControls:
        return self._controls

    def zoom_to_fit(self, duration_ms: int = 0, padding: int = 0) -> None:
        self.fits.append((duration_ms, padding))

    def refresh(self) -> None:
        self.refreshes += 1


# -----------------------------------------------------------------------------
# Sample tree
# -----------------------------------------------------------------------------

def build_sample_roots() -> List[Document]:
    c1 = Document("C1", "Auth", "CRE")
    c2 = Document("C2", "Crypto", "CRE")
    s1 = Document("ISO:1", "ISO 1", "Standard")
    s2 = Document("ISO:2", "ISO 2", "Standard")
    s3 = Document("NIST:A", "NIST A", "Standard")
    t1 = Document("T1", "Scanner", "Tool")

    c1.links = [Link("Contains", s1), Link("Contains", s2), Link("Related", c2)]
    c2.links = [
        Link("Linked To", s3),
        Link("Linked To", s1),
        Link("Linked To", t1),
        Link("SAME", c1),
    ]
    s1.links = [Link("Linked To", c1)]
    return [c1]


@pytest.fixture
def sample_tree() -> InMemoryTreeSource:
    return InMemoryTreeSource(build_sample_roots())


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def fake_sim() -> FakeSimulation:
    return FakeSimulation()


@pytest.fixture(scope="session")
def qapp():
    """Session-wide QCoreApplication for QObject/QTimer tests."""
    from PyQt6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
