"""
Neighborhood Focus - debounced hover spotlight state machine.

    idle ──hover(N)──▶ pending ──timer──▶ focused
      ▲                   │                  │
      └──hover(None) / background click ─────┘

Every hover-enter cancels the previous timer and clears the spotlight
immediately; the spotlight only appears once the pointer has rested on
a node for the full delay.
"""

import logging
from typing import Callable, FrozenSet, Optional

from ..domain.enums import FocusPhase
from ..ports.scheduler_port import SchedulerPort, TimerHandle
from .adjacency import AdjacencyIndex

logger = logging.getLogger(__name__)


DEFAULT_HOVER_DELAY_MS = 1000

STATUS_FOCUSED = "Focused neighborhood"
STATUS_HINT = "Hover 1s on a node to spotlight neighbors"


class NeighborhoodFocus:
    """
    Hover spotlight for one graph build.

    Construct a fresh instance per build and call teardown() when the
    build is replaced, so a pending timer never fires against stale data.
    """

    def __init__(
        self,
        adjacency: AdjacencyIndex,
        scheduler: SchedulerPort,
        delay_ms: int = DEFAULT_HOVER_DELAY_MS,
        on_change: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the state machine.

        Args:
            adjacency: Index of the current graph
            scheduler: Source of cancellable single-shot timers
            delay_ms: Hover time before the spotlight appears
            on_change: Called whenever the visible spotlight changes
        """
        self._adjacency = adjacency
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._on_change = on_change

        self._timer: Optional[TimerHandle] = None
        self._pending_node_id: Optional[str] = None
        self._focused_node_id: Optional[str] = None
        self._focused_node_ids: FrozenSet[str] = frozenset()
        self._focused_edge_keys: FrozenSet[str] = frozenset()
        self._torn_down = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> FocusPhase:
        if self._focused_node_id is not None:
            return FocusPhase.FOCUSED
        if self._timer is not None and self._timer.active:
            return FocusPhase.PENDING
        return FocusPhase.IDLE

    @property
    def pending_node_id(self) -> Optional[str]:
        return self._pending_node_id if self.phase == FocusPhase.PENDING else None

    @property
    def focused_node_id(self) -> Optional[str]:
        return self._focused_node_id

    @property
    def focused_node_ids(self) -> FrozenSet[str]:
        return self._focused_node_ids

    @property
    def focused_edge_keys(self) -> FrozenSet[str]:
        return self._focused_edge_keys

    @property
    def is_focused(self) -> bool:
        return self._focused_node_id is not None

    @property
    def status_text(self) -> str:
        return STATUS_FOCUSED if self.is_focused else STATUS_HINT

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def hover(self, node_id: Optional[str]) -> None:
        """Pointer entered node_id (None = pointer left all nodes)."""
        if self._torn_down:
            return

        self._cancel_timer()
        self._clear_spotlight()

        if node_id is None:
            return

        self._pending_node_id = node_id
        self._timer = self._scheduler.call_later(
            self._delay_ms, lambda: self._commit(node_id)
        )

    def background_click(self) -> None:
        """Click on empty space: back to idle."""
        self.hover(None)

    def teardown(self) -> None:
        """Cancel any pending timer and drop the spotlight for good."""
        self._cancel_timer()
        self._clear_spotlight()
        self._torn_down = True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, node_id: str) -> None:
        self._timer = None
        if self._torn_down or node_id != self._pending_node_id:
            return

        self._focused_node_id = node_id
        self._focused_node_ids = self._adjacency.neighbors(node_id) | {node_id}
        self._focused_edge_keys = self._adjacency.incident_edges(node_id)
        logger.debug(
            "[Focus] spotlight on %s (%d nodes, %d edges)",
            node_id, len(self._focused_node_ids), len(self._focused_edge_keys),
        )
        self._notify()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending_node_id = None

    def _clear_spotlight(self) -> None:
        if self._focused_node_id is None:
            return
        self._focused_node_id = None
        self._focused_node_ids = frozenset()
        self._focused_edge_keys = frozenset()
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
