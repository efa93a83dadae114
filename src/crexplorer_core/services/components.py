"""
Connected component analysis for the built graph.

Used to find the dominant mass of the graph so far-flung fragments don't
drive camera framing.
"""

from typing import Dict, List, Set

from ..domain.models import GraphPayload


def _undirected_neighbors(payload: GraphPayload) -> Dict[str, Set[str]]:
    """Adjacency map; nodes first (in given order), then any edge-only endpoints."""
    neighbors: Dict[str, Set[str]] = {node.id: set() for node in payload.nodes}
    for edge in payload.edges:
        neighbors.setdefault(edge.source, set()).add(edge.target)
        neighbors.setdefault(edge.target, set()).add(edge.source)
    return neighbors


def connected_components(payload: GraphPayload) -> List[Set[str]]:
    """
    All connected components, in discovery order.

    Iterative depth-first search with an explicit stack.
    """
    neighbors = _undirected_neighbors(payload)
    visited: Set[str] = set()
    components: List[Set[str]] = []

    for start_id in neighbors:
        if start_id in visited:
            continue

        visited.add(start_id)
        stack = [start_id]
        current: Set[str] = set()

        while stack:
            node_id = stack.pop()
            current.add(node_id)
            for next_id in neighbors[node_id]:
                if next_id not in visited:
                    visited.add(next_id)
                    stack.append(next_id)

        components.append(current)

    return components


def largest_component(payload: GraphPayload) -> Set[str]:
    """Identity set of the largest component (first discovered wins ties)."""
    largest: Set[str] = set()
    for component in connected_components(payload):
        if len(component) > len(largest):
            largest = component
    return largest
