"""
Adjacency index for neighbourhood lookups during interaction.
"""

from typing import Dict, FrozenSet, Set

from ..domain.models import GraphEdge, GraphPayload


class AdjacencyIndex:
    """
    Node id -> neighbouring node ids, and node id -> incident edge keys.

    Built once per graph payload; there is no partial update.
    """

    def __init__(self):
        self._neighbors: Dict[str, Set[str]] = {}
        self._incident: Dict[str, Set[str]] = {}

    @classmethod
    def from_payload(cls, payload: GraphPayload) -> "AdjacencyIndex":
        index = cls()
        for edge in payload.edges:
            index._add_edge(edge)
        return index

    def _add_edge(self, edge: GraphEdge) -> None:
        key = self.edge_key_for(edge)
        for a, b in ((edge.source, edge.target), (edge.target, edge.source)):
            self._neighbors.setdefault(a, set()).add(b)
            self._incident.setdefault(a, set()).add(key)

    @staticmethod
    def edge_key_for(edge: GraphEdge) -> str:
        """Direction-insensitive key used for incident-edge lookups."""
        return edge.key

    def neighbors(self, node_id: str) -> FrozenSet[str]:
        return frozenset(self._neighbors.get(node_id, ()))

    def incident_edges(self, node_id: str) -> FrozenSet[str]:
        return frozenset(self._incident.get(node_id, ()))

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._neighbors

    def __len__(self) -> int:
        return len(self._neighbors)
