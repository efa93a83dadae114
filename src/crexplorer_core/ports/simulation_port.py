"""
Simulation/renderer port interface.

The force simulation and its renderer are a black box: they take a node
and edge list, write 3D positions onto the node objects over time, and
report when motion has settled.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..domain.models import GraphPayload


Vector3 = Tuple[float, float, float]


@dataclass
class OrbitControls:
    """Orbit-control parameters owned by the renderer."""
    enable_damping: bool = True
    damping_factor: float = 0.1
    enable_pan: bool = True
    enable_rotate: bool = True
    enable_zoom: bool = True
    rotate_speed: float = 1.0
    zoom_speed: float = 1.0
    min_distance: float = 0.0
    max_distance: float = float("inf")
    target: Vector3 = (0.0, 0.0, 0.0)


class SimulationPort(ABC):
    """Abstract interface for the force simulation and its renderer."""

    # === Graph & Forces ===

    @abstractmethod
    def set_graph(self, payload: GraphPayload) -> None:
        """Replace the simulated graph. Node objects are mutated in place."""
        pass

    @abstractmethod
    def set_charge_strength(self, strength: float) -> None:
        """Set the many-body (repulsion) strength."""
        pass

    @abstractmethod
    def reheat(self) -> None:
        """Restart the simulation cooling schedule."""
        pass

    @abstractmethod
    def set_engine_stop_callback(self, callback: Optional[Callable[[], None]]) -> None:
        """Register the callback fired when the simulation settles."""
        pass

    # === Camera ===

    @abstractmethod
    def camera_position(self, position: Vector3, look_at: Vector3, duration_ms: int = 0) -> None:
        """Move the camera to position, looking at look_at."""
        pass

    @abstractmethod
    def camera_fov(self) -> Optional[float]:
        """Vertical field of view in degrees (None if unknown)."""
        pass

    @abstractmethod
    def viewport_size(self) -> Optional[Tuple[int, int]]:
        """Viewport (width, height) in pixels (None if unknown)."""
        pass

    @abstractmethod
    def controls(self) -> OrbitControls:
        """Get the live orbit-control parameters."""
        pass

    @abstractmethod
    def zoom_to_fit(self, duration_ms: int = 0, padding: int = 0) -> None:
        """Generic fit-all-content camera move."""
        pass

    @abstractmethod
    def refresh(self) -> None:
        """Redraw after positions were changed outside the simulation."""
        pass
