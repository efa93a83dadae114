"""
Explorer Graph ViewModel.

Manages:
- Filter parameters (ignored relation types, two endpoint selectors, show-all)
- The current graph build and its adjacency index
- Hover spotlight state (one NeighborhoodFocus per build)
- Staged force-strength timers after each rebuild
- One-shot camera framing when the simulation settles

The renderer receives state from this ViewModel and focuses purely on
drawing.
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from PyQt6.QtCore import pyqtSignal

from .base import BaseViewModel
from crexplorer_core.adapters.force_simulation import SimulationSettings
from crexplorer_core.domain.enums import normalize_relation
from crexplorer_core.domain.models import DropdownOption, GraphPayload
from crexplorer_core.ports.scheduler_port import SchedulerPort
from crexplorer_core.ports.simulation_port import SimulationPort
from crexplorer_core.ports.tree_port import TreeSourcePort
from crexplorer_core.services.adjacency import AdjacencyIndex
from crexplorer_core.services.camera import CameraFramer, CameraPose, CameraSettings
from crexplorer_core.services.components import largest_component
from crexplorer_core.services.focus import NeighborhoodFocus, STATUS_HINT
from crexplorer_core.services.graph_builder import BuildResult, GraphBuilder

logger = logging.getLogger(__name__)


EMPTY_MESSAGE = 'Please select at least one filter to view the graph or enable "Show All".'


class SettingsError(ValueError):
    """A settings file could not be read or has the wrong shape."""


@dataclass
class ExplorerSettings:
    """Explorer tunables."""
    hover_delay_ms: int = 1000
    default_ignore_types: List[str] = field(default_factory=lambda: ["same"])

    # Staged repulsion: start tight, expand, settle
    initial_charge: float = -55.0
    expand_charge: float = -75.0
    expand_delay_ms: int = 200
    settle_charge: float = -95.0
    settle_delay_ms: int = 620

    # Orbit controls applied on every rebuild
    damping_factor: float = 0.12
    rotate_speed: float = 0.85
    zoom_speed: float = 1.0
    min_distance: float = 90.0
    max_distance: float = 5200.0

    camera: CameraSettings = field(default_factory=CameraSettings)
    simulation: SimulationSettings = field(default_factory=SimulationSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExplorerSettings":
        """Apply overrides onto the defaults; unknown keys are skipped."""
        if not isinstance(data, dict):
            raise SettingsError(f"Settings must be a JSON object, got {type(data).__name__}")
        settings = cls()
        camera = _override(settings.camera, _section(data, "camera"), "camera")
        simulation = _override(settings.simulation, _section(data, "simulation"), "simulation")
        flat = {k: v for k, v in data.items() if k not in ("camera", "simulation")}
        settings = _override(settings, flat, "explorer")
        return replace(settings, camera=camera, simulation=simulation)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ExplorerSettings":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsError(f"Cannot read settings from {path}: {e}") from e
        return cls.from_dict(data)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SettingsError(f"'{name}' settings must be an object, got {type(value).__name__}")
    return value


def _override(obj, values: Dict[str, Any], section: str):
    known = {f.name for f in fields(obj)} - {"camera", "simulation"}
    updates = {}
    for key, value in values.items():
        if key in known:
            updates[key] = value
        else:
            logger.warning("[Settings] ignoring unknown %s setting %r", section, key)
    return replace(obj, **updates)


class ExplorerGraphVM(BaseViewModel):
    """
    ViewModel for the explorer force graph.

    Signals:
        graph_changed: Emitted after every rebuild
        options_changed: Emitted when dropdown taxonomies change
        counts_changed(int, int): Node and edge counts after a rebuild
        focus_changed: Emitted when the spotlight appears or clears
        camera_framed: Emitted once the settled graph has been framed

    State:
        graph: Current GraphPayload
        adjacency: AdjacencyIndex for the current graph
        focus: NeighborhoodFocus for the current graph
        ignore_types / filter_a / filter_b / show_all: Filter parameters
    """

    # Signals
    graph_changed = pyqtSignal()
    options_changed = pyqtSignal()
    counts_changed = pyqtSignal(int, int)
    focus_changed = pyqtSignal()
    camera_framed = pyqtSignal()

    def __init__(
        self,
        tree: TreeSourcePort,
        scheduler: SchedulerPort,
        simulation: Optional[SimulationPort] = None,
        settings: Optional[ExplorerSettings] = None,
    ):
        """
        Initialize the ViewModel.

        Args:
            tree: Source of the document tree
            scheduler: Timer source for hover and staged-force timers
            simulation: Force simulation/renderer (optional for headless use)
            settings: Explorer tunables
        """
        super().__init__(scheduler)

        self._tree = tree
        self._simulation = simulation
        self._settings = settings or ExplorerSettings()

        self._builder = GraphBuilder(tree)
        self._framer = CameraFramer(self._settings.camera)

        # Filter state
        self._ignore_types: Set[str] = {
            normalize_relation(t) for t in self._settings.default_ignore_types
        }
        self._filter_a = ""
        self._filter_b = ""
        self._show_all = True

        # Build state
        self._result: Optional[BuildResult] = None
        self._adjacency = AdjacencyIndex()
        self._focus: Optional[NeighborhoodFocus] = None
        self._largest: Optional[Set[str]] = None

        if simulation is not None:
            simulation.set_engine_stop_callback(self.on_engine_stop)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> ExplorerSettings:
        return self._settings

    @property
    def graph(self) -> GraphPayload:
        return self._result.payload if self._result else GraphPayload()

    @property
    def adjacency(self) -> AdjacencyIndex:
        return self._adjacency

    @property
    def focus(self) -> Optional[NeighborhoodFocus]:
        return self._focus

    @property
    def node_count(self) -> int:
        return len(self.graph.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.graph.edges)

    @property
    def max_node_size(self) -> int:
        return self.graph.max_node_size

    @property
    def type_options(self) -> List[DropdownOption]:
        return list(self._result.type_options) if self._result else []

    @property
    def combined_options(self) -> List[DropdownOption]:
        return list(self._result.combined_options) if self._result else []

    @property
    def ignore_types(self) -> Set[str]:
        return set(self._ignore_types)

    @property
    def filter_a(self) -> str:
        return self._filter_a

    @property
    def filter_b(self) -> str:
        return self._filter_b

    @property
    def show_all(self) -> bool:
        return self._show_all

    @property
    def is_graph_visible(self) -> bool:
        """The graph is shown when show-all is on or any selector is set."""
        return self._show_all or bool(self._filter_a) or bool(self._filter_b)

    @property
    def empty_message(self) -> Optional[str]:
        return None if self.is_graph_visible else EMPTY_MESSAGE

    @property
    def status_text(self) -> str:
        return self._focus.status_text if self._focus else STATUS_HINT

    @property
    def largest_component(self) -> Set[str]:
        if self._largest is None:
            self._largest = largest_component(self.graph)
        return set(self._largest)

    @property
    def camera_pose(self) -> Optional[CameraPose]:
        return self._framer.last_pose

    @property
    def is_framed(self) -> bool:
        return self._framer.framed

    # -------------------------------------------------------------------------
    # Filter Commands
    # -------------------------------------------------------------------------

    def toggle_relation(self, name: str) -> None:
        """Toggle a relation type between shown and ignored."""
        relation = normalize_relation(name)
        if relation in self._ignore_types:
            self._ignore_types.discard(relation)
        else:
            self._ignore_types.add(relation)
        self.rebuild()

    def is_relation_shown(self, name: str) -> bool:
        return normalize_relation(name) not in self._ignore_types

    def set_filter_a(self, value: Optional[str]) -> None:
        value = value or ""
        if self._filter_a != value:
            self._filter_a = value
            self.rebuild()

    def set_filter_b(self, value: Optional[str]) -> None:
        value = value or ""
        if self._filter_b != value:
            self._filter_b = value
            self.rebuild()

    def set_show_all(self, show: bool) -> None:
        if self._show_all != show:
            self._show_all = show
            self.rebuild()

    def apply_filters(self, filter_a: str = "", filter_b: str = "", show_all: bool = True) -> None:
        """Set both selectors and the show-all gate with a single rebuild."""
        self._filter_a = filter_a or ""
        self._filter_b = filter_b or ""
        self._show_all = show_all
        self.rebuild()

    def on_tree_changed(self) -> None:
        """Source tree or store changed upstream."""
        self.rebuild()

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def rebuild(self) -> None:
        """Rebuild the graph from scratch and restart the motion profile."""
        self._cancel_timers()
        if self._focus is not None:
            self._focus.teardown()
        self._framer.reset()

        self._result = self._builder.build(
            ignore_types=self._ignore_types,
            filter_a=self._filter_a,
            filter_b=self._filter_b,
            show_all=self._show_all,
        )
        self._largest = None
        self._adjacency = AdjacencyIndex.from_payload(self._result.payload)
        self._focus = NeighborhoodFocus(
            self._adjacency,
            self._scheduler,
            delay_ms=self._settings.hover_delay_ms,
            on_change=self.focus_changed.emit,
        )

        logger.info(
            "[ExplorerGraphVM] rebuilt: %d nodes, %d connections",
            self.node_count, self.edge_count,
        )

        if self._simulation is not None:
            if self.is_graph_visible:
                self._start_simulation()
            else:
                self._simulation.set_graph(GraphPayload())

        self._notify_change(self.graph_changed)
        self._notify_change(self.options_changed)
        self._notify_change(self.counts_changed, self.node_count, self.edge_count)
        self._notify_change(self.focus_changed)

    def _start_simulation(self) -> None:
        sim = self._simulation
        s = self._settings

        sim.set_graph(self._result.payload)

        controls = sim.controls()
        controls.enable_damping = True
        controls.damping_factor = s.damping_factor
        controls.enable_pan = False
        controls.enable_rotate = True
        controls.enable_zoom = True
        controls.rotate_speed = s.rotate_speed
        controls.zoom_speed = s.zoom_speed
        controls.min_distance = s.min_distance
        controls.max_distance = s.max_distance

        # Start tight
        sim.set_charge_strength(s.initial_charge)
        self._call_later(s.expand_delay_ms, lambda: self._stage_charge(s.expand_charge))
        self._call_later(s.settle_delay_ms, lambda: self._stage_charge(s.settle_charge))

    def _stage_charge(self, strength: float) -> None:
        if self._simulation is None:
            return
        self._simulation.set_charge_strength(strength)
        self._simulation.reheat()

    # -------------------------------------------------------------------------
    # Interaction Commands
    # -------------------------------------------------------------------------

    def hover_node(self, node_id: Optional[str]) -> None:
        """Pointer entered a node (None = left all nodes)."""
        if self._focus is not None:
            self._focus.hover(node_id)

    def background_click(self) -> None:
        if self._focus is not None:
            self._focus.background_click()

    def on_engine_stop(self) -> None:
        """Simulation settled: frame the camera once per build."""
        if self._simulation is None or self._result is None or self._framer.framed:
            return
        self._framer.on_settle(self._result.payload, self._simulation)
        self._notify_change(self.camera_framed)

    def teardown(self) -> None:
        """Cancel every outstanding timer; call before discarding the VM."""
        self._cancel_timers()
        if self._focus is not None:
            self._focus.teardown()
        if self._simulation is not None:
            self._simulation.set_engine_stop_callback(None)
