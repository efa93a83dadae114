"""
ForceSimulation - a small numpy 3D force engine.

Implements SimulationPort so the pipeline can run without a browser
renderer. Modelled on the usual velocity-Verlet force scheme:

1. Many-body charge between every pair of nodes (negative = repulsion)
2. Springs along edges (weaker for high-degree endpoints)
3. Centering (keep the mean position at the origin)

Alpha cools every tick; when it drops below alpha_min, or the cooldown
tick budget runs out, the engine stops and fires the stop callback.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from ..domain.models import GraphPayload
from ..ports.simulation_port import OrbitControls, SimulationPort, Vector3

logger = logging.getLogger(__name__)


@dataclass
class SimulationSettings:
    """Engine and viewport parameters."""
    velocity_decay: float = 0.32
    alpha_decay: float = 0.032
    alpha_min: float = 0.001
    cooldown_ticks: int = 100
    charge_strength: float = -55.0
    link_distance: float = 30.0
    distance_min: float = 1.0
    initial_radius: float = 10.0
    charge_chunk_size: int = 256      # Rows per pairwise block; bounds memory to chunk x n x 3

    # Camera/viewport the renderer would own
    fov: float = 40.0
    width: int = 1920
    height: int = 1080
    initial_camera_distance: float = 1000.0


class ForceSimulation(SimulationPort):
    """
    In-process force simulation.

    Writes x/y/z onto the payload's GraphNode objects after every tick.
    """

    def __init__(self, settings: Optional[SimulationSettings] = None):
        """
        Initialize the engine.

        Args:
            settings: Engine parameters (default SimulationSettings)
        """
        self.settings = settings or SimulationSettings()

        self._payload = GraphPayload()
        self._pos = np.zeros((0, 3))
        self._vel = np.zeros((0, 3))
        self._links = np.zeros((0, 2), dtype=int)
        self._link_strength = np.zeros(0)
        self._link_bias = np.zeros(0)

        self._charge = self.settings.charge_strength
        self._alpha = 0.0
        self._ticks = 0
        self._running = False
        self._on_stop: Optional[Callable[[], None]] = None
        self._rng = np.random.default_rng(0)

        self._controls = OrbitControls()
        self._camera: Vector3 = (0.0, 0.0, self.settings.initial_camera_distance)
        self._look_at: Vector3 = (0.0, 0.0, 0.0)
        self.refresh_count = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def charge_strength(self) -> float:
        return self._charge

    @property
    def camera(self) -> Tuple[Vector3, Vector3]:
        """Current (position, look_at)."""
        return self._camera, self._look_at

    # -------------------------------------------------------------------------
    # SimulationPort: graph & forces
    # -------------------------------------------------------------------------

    def set_graph(self, payload: GraphPayload) -> None:
        self._payload = payload
        n = len(payload.nodes)
        index: Dict[str, int] = {node.id: i for i, node in enumerate(payload.nodes)}

        self._pos = np.zeros((n, 3))
        for i, node in enumerate(payload.nodes):
            if node.has_position:
                self._pos[i] = (node.x, node.y, node.z)
            else:
                self._pos[i] = self._initial_position(i)
        self._vel = np.zeros((n, 3))

        pairs = [
            (index[e.source], index[e.target])
            for e in payload.edges
            if e.source in index and e.target in index and e.source != e.target
        ]
        self._links = np.array(pairs, dtype=int).reshape(-1, 2)

        degree = np.zeros(n)
        for s, t in pairs:
            degree[s] += 1
            degree[t] += 1
        if len(pairs):
            ds = degree[self._links[:, 0]]
            dt = degree[self._links[:, 1]]
            self._link_strength = 1.0 / np.minimum(ds, dt)
            self._link_bias = ds / (ds + dt)
        else:
            self._link_strength = np.zeros(0)
            self._link_bias = np.zeros(0)

        self._write_back()
        self.reheat()
        logger.debug("[ForceSimulation] graph set: %d nodes, %d links", n, len(pairs))

    def set_charge_strength(self, strength: float) -> None:
        self._charge = strength

    def reheat(self) -> None:
        self._alpha = 1.0
        self._ticks = 0
        self._running = len(self._payload.nodes) > 0

    def set_engine_stop_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_stop = callback

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance one step.

        Returns:
            True while the engine is still running
        """
        if not self._running:
            return False

        s = self.settings
        self._alpha += (0.0 - self._alpha) * s.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_center()

        self._vel *= (1.0 - s.velocity_decay)
        self._pos += self._vel
        self._write_back()

        self._ticks += 1
        if self._alpha < s.alpha_min or self._ticks >= s.cooldown_ticks:
            self._running = False
            logger.debug("[ForceSimulation] settled after %d ticks", self._ticks)
            if self._on_stop is not None:
                self._on_stop()
        return self._running

    def run_until_settled(self, max_ticks: int = 10000) -> int:
        """Tick until the engine stops (headless use). Returns ticks run."""
        count = 0
        while self._running and count < max_ticks:
            self.tick()
            count += 1
        return count

    def _initial_position(self, i: int) -> np.ndarray:
        """Deterministic spiral seeding."""
        radius = self.settings.initial_radius * math.cbrt(0.5 + i)
        roll = i * math.pi * (3 - math.sqrt(5))
        yaw = i * math.pi * 20 / (9 + math.sqrt(221))
        return np.array([
            radius * math.sin(roll) * math.cos(yaw),
            radius * math.cos(roll),
            radius * math.sin(roll) * math.sin(yaw),
        ])

    def _apply_links(self) -> None:
        if not len(self._links):
            return
        src, dst = self._links[:, 0], self._links[:, 1]
        delta = (self._pos[dst] + self._vel[dst]) - (self._pos[src] + self._vel[src])
        length = np.linalg.norm(delta, axis=1)
        length = np.where(length == 0, self._jiggle(len(length)), length)
        scale = (length - self.settings.link_distance) / length * self._alpha * self._link_strength
        delta *= scale[:, None]
        np.add.at(self._vel, dst, -delta * self._link_bias[:, None])
        np.add.at(self._vel, src, delta * (1.0 - self._link_bias)[:, None])

    def _apply_charge(self) -> None:
        n = len(self._pos)
        if n < 2 or self._charge == 0:
            return
        chunk = max(1, self.settings.charge_chunk_size)
        min_dist2 = self.settings.distance_min ** 2
        scale = self._charge * self._alpha
        for start in range(0, n, chunk):
            stop = min(start + chunk, n)
            delta = self._pos[None, :, :] - self._pos[start:stop, None, :]     # j - i
            dist2 = np.maximum(np.sum(delta * delta, axis=2), min_dist2)
            rows = np.arange(stop - start)
            dist2[rows, rows + start] = np.inf
            self._vel[start:stop] += np.sum(delta * (scale / dist2)[:, :, None], axis=1)

    def _apply_center(self) -> None:
        if len(self._pos):
            self._pos -= self._pos.mean(axis=0)

    def _jiggle(self, count: int) -> np.ndarray:
        return (self._rng.random(count) - 0.5) * 1e-6

    def _write_back(self) -> None:
        for node, (x, y, z) in zip(self._payload.nodes, self._pos):
            node.x, node.y, node.z = float(x), float(y), float(z)

    # -------------------------------------------------------------------------
    # SimulationPort: camera
    # -------------------------------------------------------------------------

    def camera_position(self, position: Vector3, look_at: Vector3, duration_ms: int = 0) -> None:
        self._camera = tuple(position)
        self._look_at = tuple(look_at)

    def camera_fov(self) -> Optional[float]:
        return self.settings.fov

    def viewport_size(self) -> Optional[Tuple[int, int]]:
        return self.settings.width, self.settings.height

    def controls(self) -> OrbitControls:
        return self._controls

    def zoom_to_fit(self, duration_ms: int = 0, padding: int = 0) -> None:
        if not len(self._pos):
            self._look_at = (0.0, 0.0, 0.0)
            self._camera = (0.0, 0.0, self.settings.initial_camera_distance)
            return
        lo, hi = self._pos.min(axis=0), self._pos.max(axis=0)
        center = (lo + hi) / 2
        radius = float(np.linalg.norm(hi - lo)) / 2 + padding
        distance = max(radius / math.tan(math.radians(self.settings.fov) / 2), 1.0)
        self._look_at = tuple(float(c) for c in center)
        self._camera = (float(center[0]), float(center[1]), float(center[2]) + distance)

    def refresh(self) -> None:
        # Positions were moved outside a tick; resync the engine state
        self._pos = np.array(
            [[n.x, n.y, n.z] for n in self._payload.nodes], dtype=float
        ).reshape(-1, 3)
        self.refresh_count += 1
