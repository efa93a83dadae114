"""
Tests for connected component analysis.
"""

from crexplorer_core.domain.enums import DocType
from crexplorer_core.domain.models import GraphEdge, GraphNode, GraphPayload
from crexplorer_core.services.components import connected_components, largest_component


def make_payload(node_ids, pairs):
    nodes = [GraphNode(id=i, name=i, doc_type=DocType.CRE) for i in node_ids]
    edges = [GraphEdge(source=a, target=b, relation="Related") for a, b in pairs]
    return GraphPayload(nodes=nodes, edges=edges)


class TestComponents:

    def test_two_triangles_and_singleton(self):
        payload = make_payload(
            ["a", "b", "c", "d", "e", "f", "g"],
            [("a", "b"), ("b", "c"), ("c", "a"), ("d", "e"), ("e", "f"), ("f", "d")],
        )
        components = connected_components(payload)
        assert sorted(len(c) for c in components) == [1, 3, 3]

        largest = largest_component(payload)
        assert len(largest) == 3
        assert largest == {"a", "b", "c"}   # first discovered wins ties

    def test_larger_component_wins(self):
        payload = make_payload(
            ["x", "a", "b", "c"],
            [("a", "b"), ("b", "c")],
        )
        assert largest_component(payload) == {"a", "b", "c"}

    def test_edge_only_endpoints_are_included(self):
        payload = make_payload(["a"], [("a", "z")])
        assert largest_component(payload) == {"a", "z"}

    def test_empty_graph(self):
        assert connected_components(GraphPayload()) == []
        assert largest_component(GraphPayload()) == set()

    def test_long_chain(self):
        """Deep chains must not hit the recursion limit."""
        ids = [f"n{i}" for i in range(5000)]
        payload = make_payload(ids, list(zip(ids, ids[1:])))
        assert len(largest_component(payload)) == 5000
