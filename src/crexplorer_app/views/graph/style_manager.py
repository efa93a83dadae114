"""
Style manager for the explorer force graph.

Centralizes node/link colors, widths and sizes, including the
spotlight rendering policy used while a neighbourhood is focused.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from PyQt6.QtGui import QColor

from crexplorer_core.domain.models import GraphEdge, GraphNode
from crexplorer_core.services.focus import NeighborhoodFocus


def _rgba(r: int, g: int, b: int, alpha: float) -> QColor:
    color = QColor(r, g, b)
    color.setAlphaF(alpha)
    return color


@dataclass
class GraphStyle:
    """All styling parameters for the graph."""

    # Background
    bg_color: QColor = field(default_factory=lambda: QColor("#02050d"))

    # Spotlight
    focus_color: QColor = field(default_factory=lambda: QColor("#ffffff"))
    dimmed_node_color: QColor = field(default_factory=lambda: _rgba(148, 163, 184, 0.16))
    faint_link_color: QColor = field(default_factory=lambda: _rgba(148, 163, 184, 0.05))

    # Fallbacks
    default_node_color: QColor = field(default_factory=lambda: QColor("#c4b5fd"))
    default_link_color: QColor = field(default_factory=lambda: _rgba(148, 163, 184, 0.45))

    # Widths / opacity
    link_width: float = 5.0
    faint_link_width: float = 1.0
    idle_link_opacity: float = 0.25
    focused_link_opacity: float = 1.0

    # Sizes
    node_rel_size: float = 6.32
    max_node_value: float = 14.0
    min_node_value: float = 0.8


class StyleManager:
    """Manages all styling for the force graph."""

    # Doctype colors
    DOCTYPE_COLORS: Dict[str, QColor] = {
        'cre': QColor("#93c5fd"),       # Blue
        'standard': QColor("#f59e0b"),  # Amber
        'tool': QColor("#86efac"),      # Green
    }

    # Relationship edge colors
    RELATION_COLORS: Dict[str, QColor] = {
        'contains': _rgba(45, 212, 191, 0.55),    # Teal
        'related': _rgba(96, 165, 250, 0.55),     # Blue
        'linked to': _rgba(196, 181, 253, 0.55),  # Lavender
        'same': _rgba(251, 113, 133, 0.55),       # Rose
    }

    def __init__(self, style: Optional[GraphStyle] = None):
        self.style = style or GraphStyle()

    # -------------------------------------------------------------------------
    # Base colors
    # -------------------------------------------------------------------------

    def get_node_base_color(self, node: GraphNode) -> QColor:
        return self.DOCTYPE_COLORS.get(node.doc_type.value, self.style.default_node_color)

    def get_link_base_color(self, edge: GraphEdge) -> QColor:
        return self.RELATION_COLORS.get(edge.relation_type, self.style.default_link_color)

    # -------------------------------------------------------------------------
    # Spotlight policy
    # -------------------------------------------------------------------------

    def get_node_color(self, node: GraphNode, focus: Optional[NeighborhoodFocus] = None) -> QColor:
        """
        Node color under the current focus.

        Focused node is white, its neighbourhood keeps type colors,
        everything else is dimmed.
        """
        base = self.get_node_base_color(node)
        if focus is None or not focus.is_focused:
            return base
        if node.id not in focus.focused_node_ids:
            return self.style.dimmed_node_color
        if node.id == focus.focused_node_id:
            return self.style.focus_color
        return base

    def _is_focused_link(self, edge: GraphEdge, focus: NeighborhoodFocus) -> bool:
        return edge.key in focus.focused_edge_keys

    def get_link_color(self, edge: GraphEdge, focus: Optional[NeighborhoodFocus] = None) -> QColor:
        if focus is None or not focus.is_focused:
            return self.get_link_base_color(edge)
        if self._is_focused_link(edge, focus):
            return self.get_link_base_color(edge)
        return self.style.faint_link_color

    def get_link_width(self, edge: GraphEdge, focus: Optional[NeighborhoodFocus] = None) -> float:
        if focus is None or not focus.is_focused:
            return self.style.link_width
        if self._is_focused_link(edge, focus):
            return self.style.link_width
        return self.style.faint_link_width

    def get_link_opacity(self, focus: Optional[NeighborhoodFocus] = None) -> float:
        if focus is not None and focus.is_focused:
            return self.style.focused_link_opacity
        return self.style.idle_link_opacity

    # -------------------------------------------------------------------------
    # Size / label
    # -------------------------------------------------------------------------

    def get_node_value(self, node: GraphNode, max_node_size: int) -> float:
        """Relative node volume, scaled against the largest node."""
        value = self.style.max_node_value * (node.size or 1) / max(max_node_size, 1)
        return max(value, self.style.min_node_value)

    def get_node_label(self, node: GraphNode) -> str:
        return node.label
