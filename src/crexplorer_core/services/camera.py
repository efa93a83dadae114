"""
Camera Framer - stable camera pose after the simulation settles.

Steps, run once per settle:
1. Align: rotate the dominant component's principal axis onto x and
   mirror so the denser half sits on the right.
2. Frame: trimmed (outlier-resistant) extent per axis for the center,
   raw spans for the distance.
3. Place: fit distance from field of view and aspect ratio, pulled back
   and clamped, with a slightly off-center look-at.

Falls back to the renderer's generic fit-all when nothing is positioned.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Set, Tuple

import numpy as np

from ..domain.models import GraphNode, GraphPayload
from ..ports.simulation_port import SimulationPort, Vector3
from .components import largest_component

logger = logging.getLogger(__name__)


@dataclass
class CameraSettings:
    """Framing constants."""
    # Sampling
    min_align_nodes: int = 3
    min_primary_nodes: int = 8
    min_trim_samples: int = 12
    trim_fraction: float = 0.1

    # Viewport defaults when the renderer can't tell us
    default_fov: float = 40.0
    default_width: int = 1920
    default_height: int = 1080

    # Placement
    pull_back: float = 1.66
    min_distance: float = 1200.0
    max_distance: float = 2550.0
    look_at_x_bias: float = 0.02      # fraction of x-span to the right
    look_at_y_bias: float = 0.035     # fraction of y-span down
    camera_lift: float = 0.017        # fraction of y-span above the look-at

    # Orbit zoom bounds
    zoom_min_factor: float = 0.36
    zoom_min_floor: float = 150.0
    zoom_min_ceiling: float = 420.0
    zoom_max_factor: float = 6.8
    zoom_max_floor: float = 3600.0

    # Transitions
    transition_ms: int = 900
    fit_all_ms: int = 850
    fit_all_padding: int = 80


@dataclass(frozen=True)
class CameraFrame:
    """Robust bounds of the positioned graph."""
    center_x: float
    center_y: float
    center_z: float
    max_span: float
    raw_span_x: float
    raw_span_y: float
    raw_span_z: float
    raw_max_span: float


@dataclass(frozen=True)
class CameraPose:
    """Final camera placement and zoom bounds."""
    position: Vector3
    look_at: Vector3
    distance: float
    min_distance: float
    max_distance: float


# -----------------------------------------------------------------------------
# Statistics helpers
# -----------------------------------------------------------------------------

def trimmed_extent(
    values: Sequence[float],
    min_samples: int = 12,
    fraction: float = 0.1,
) -> Tuple[float, float]:
    """
    Min/max after discarding the outer tails.

    With fewer than min_samples values the true min/max is returned.
    Otherwise the bounds are the sorted values at floor((n-1)*fraction)
    and ceil((n-1)*(1-fraction)).
    """
    if len(values) == 0:
        return 0.0, 0.0

    ordered = np.sort(np.asarray(values, dtype=float))
    if len(ordered) < min_samples:
        return float(ordered[0]), float(ordered[-1])

    last = len(ordered) - 1
    lower = math.floor(last * fraction)
    upper = math.ceil(last * (1.0 - fraction))
    return float(ordered[lower]), float(ordered[upper])


def _finite_xy(node: GraphNode) -> bool:
    return (
        node.x is not None and node.y is not None
        and math.isfinite(node.x) and math.isfinite(node.y)
    )


# -----------------------------------------------------------------------------
# Step 1 - alignment
# -----------------------------------------------------------------------------

def align_for_final_pose(payload: GraphPayload, primary_ids: Set[str], min_nodes: int = 3) -> bool:
    """
    Rotate and mirror node positions in place.

    Returns:
        True if the transform was applied
    """
    primary = [n for n in payload.nodes if n.id in primary_ids and n.has_position]
    if len(primary) < min_nodes:
        return False

    xy = np.array([[n.x, n.y] for n in primary], dtype=float)
    center = xy.mean(axis=0)
    offsets = xy - center
    sxx = float(np.sum(offsets[:, 0] ** 2))
    syy = float(np.sum(offsets[:, 1] ** 2))
    sxy = float(np.sum(offsets[:, 0] * offsets[:, 1]))

    major_axis = 0.5 * math.atan2(2 * sxy, sxx - syy)
    theta = -major_axis
    rotation = np.array([
        [math.cos(theta), -math.sin(theta)],
        [math.sin(theta), math.cos(theta)],
    ])

    movable = [n for n in payload.nodes if _finite_xy(n)]
    for node in movable:
        dx, dy = rotation @ np.array([node.x - center[0], node.y - center[1]])
        node.x = float(center[0] + dx)
        node.y = float(center[1] + dy)

    left = sum(1 for n in primary if n.x < center[0])
    right = len(primary) - left
    if right < left:
        for node in movable:
            node.x = float(center[0] - (node.x - center[0]))
            node.y = float(center[1] - (node.y - center[1]))

    logger.debug(
        "[CameraFramer] aligned %d nodes by %.3f rad (mirrored=%s)",
        len(movable), theta, right < left,
    )
    return True


# -----------------------------------------------------------------------------
# Step 2 - robust frame
# -----------------------------------------------------------------------------

def stable_camera_frame(
    payload: GraphPayload,
    primary_ids: Set[str],
    settings: Optional[CameraSettings] = None,
) -> Optional[CameraFrame]:
    """Compute the robust frame, or None when no node has a position."""
    settings = settings or CameraSettings()

    positioned_all = [n for n in payload.nodes if n.has_position]
    positioned_main = [n for n in positioned_all if n.id in primary_ids]
    frame_nodes = positioned_main if len(positioned_main) >= settings.min_primary_nodes else positioned_all

    if not frame_nodes:
        return None

    coords = np.array([[n.x, n.y, n.z] for n in frame_nodes], dtype=float)
    extents = [
        trimmed_extent(coords[:, axis], settings.min_trim_samples, settings.trim_fraction)
        for axis in range(3)
    ]
    spans = [max(hi - lo, 1.0) for lo, hi in extents]
    raw_spans = np.maximum(coords.max(axis=0) - coords.min(axis=0), 1.0)

    return CameraFrame(
        center_x=(extents[0][0] + extents[0][1]) / 2,
        center_y=(extents[1][0] + extents[1][1]) / 2,
        center_z=(extents[2][0] + extents[2][1]) / 2,
        max_span=max(*spans, 1.0),
        raw_span_x=float(raw_spans[0]),
        raw_span_y=float(raw_spans[1]),
        raw_span_z=float(raw_spans[2]),
        raw_max_span=max(float(raw_spans.max()), 1.0),
    )


# -----------------------------------------------------------------------------
# Step 3 - placement
# -----------------------------------------------------------------------------

def camera_fit_distance(
    span_x: float,
    span_y: float,
    fov: Optional[float] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> float:
    """
    Distance at which a span_x by span_y rectangle fills the viewport.

    Computed against the height and the width separately; the larger wins.
    """
    width = width or 1920
    height = height or 1080
    aspect = max(width / max(height, 1), 0.0001)
    half_fov_tan = math.tan(math.radians(fov or 40.0) / 2)

    distance_for_height = (max(span_y, 1.0) * 0.5) / max(half_fov_tan, 0.0001)
    distance_for_width = (max(span_x, 1.0) * 0.5) / max(half_fov_tan * aspect, 0.0001)
    return max(distance_for_height, distance_for_width, 1.0)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def compute_camera_pose(
    frame: CameraFrame,
    fov: Optional[float] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    settings: Optional[CameraSettings] = None,
) -> CameraPose:
    """Place the camera for a frame."""
    s = settings or CameraSettings()

    look_at_x = frame.center_x + frame.raw_span_x * s.look_at_x_bias
    look_at_y = frame.center_y - frame.raw_span_y * s.look_at_y_bias
    base = camera_fit_distance(
        frame.raw_span_x, frame.raw_span_y,
        fov or s.default_fov, width or s.default_width, height or s.default_height,
    )
    distance = _clamp(base * s.pull_back, s.min_distance, s.max_distance)
    camera_y = look_at_y + frame.raw_span_y * s.camera_lift

    return CameraPose(
        position=(look_at_x, camera_y, frame.center_z + distance),
        look_at=(look_at_x, look_at_y, frame.center_z),
        distance=distance,
        min_distance=_clamp(distance * s.zoom_min_factor, s.zoom_min_floor, s.zoom_min_ceiling),
        max_distance=max(distance * s.zoom_max_factor, s.zoom_max_floor),
    )


class CameraFramer:
    """
    Runs alignment, framing and placement once per settle.

    reset() re-arms the guard; call it whenever the graph is rebuilt.
    """

    def __init__(self, settings: Optional[CameraSettings] = None):
        self.settings = settings or CameraSettings()
        self._framed = False
        self._last_pose: Optional[CameraPose] = None

    @property
    def framed(self) -> bool:
        return self._framed

    @property
    def last_pose(self) -> Optional[CameraPose]:
        return self._last_pose

    def reset(self) -> None:
        self._framed = False
        self._last_pose = None

    def on_settle(self, payload: GraphPayload, simulation: SimulationPort) -> Optional[CameraPose]:
        """
        Frame the settled graph.

        Returns:
            The applied pose, or None when already framed or on fit-all fallback
        """
        if self._framed:
            return None

        s = self.settings
        primary_ids = largest_component(payload)
        if align_for_final_pose(payload, primary_ids, s.min_align_nodes):
            simulation.refresh()

        frame = stable_camera_frame(payload, primary_ids, s)
        if frame is None:
            logger.debug("[CameraFramer] nothing positioned, falling back to fit-all")
            simulation.zoom_to_fit(s.fit_all_ms, s.fit_all_padding)
            self._framed = True
            return None

        width, height = simulation.viewport_size() or (s.default_width, s.default_height)
        pose = compute_camera_pose(frame, simulation.camera_fov(), width, height, s)

        simulation.camera_position(pose.position, pose.look_at, s.transition_ms)
        controls = simulation.controls()
        controls.min_distance = pose.min_distance
        controls.max_distance = pose.max_distance
        controls.target = pose.look_at

        logger.debug(
            "[CameraFramer] distance %.1f, look-at (%.1f, %.1f, %.1f)",
            pose.distance, *pose.look_at,
        )
        self._framed = True
        self._last_pose = pose
        return pose
