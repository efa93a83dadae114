"""
Graph Builder - derives the explorer graph from the document tree.

Produces a deduplicated node/edge payload plus the dropdown taxonomies
used by the endpoint-selection controls. Every call rebuilds from
scratch; nothing is carried over from a previous build.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..domain.enums import DocType, normalize_relation
from ..domain.models import (
    Document, DropdownOption, GraphEdge, GraphNode, GraphPayload, edge_key,
)
from ..ports.tree_port import TreeSourcePort
from .flattener import (
    FlattenResult, TreeFlattener, base_from_grouped, is_grouped_id,
)
from .selectors import EndpointSelector, make_placeholder

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Output of a graph build."""
    payload: GraphPayload
    type_options: List[DropdownOption] = field(default_factory=list)
    combined_options: List[DropdownOption] = field(default_factory=list)
    flatten: FlattenResult = field(default_factory=FlattenResult)

    @property
    def node_count(self) -> int:
        return len(self.payload.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.payload.edges)


class GraphBuilder:
    """
    Builds the graph payload for a tree source.

    Pipeline:
    1. Flatten standards into family groups
    2. Depth-first walk of the tree recording typed edges
    3. Optional endpoint post-filter
    4. Node materialization from surviving edges
    5. Edge reversal (target becomes source) for the simulation
    """

    def __init__(self, tree: TreeSourcePort, flattener: Optional[TreeFlattener] = None):
        """
        Initialize the builder.

        Args:
            tree: Source of root documents, store keys and the flat store
            flattener: Standards flattener (default keyed on tree.store_key)
        """
        self.tree = tree
        self.flattener = flattener or TreeFlattener(store_key=tree.store_key)

    def build(
        self,
        ignore_types: Iterable[str] = (),
        filter_a: str = "",
        filter_b: str = "",
        show_all: bool = True,
    ) -> BuildResult:
        """
        Build the graph.

        Args:
            ignore_types: Relation types to leave out (any casing)
            filter_a: First endpoint-selection value
            filter_b: Second endpoint-selection value
            show_all: When True the endpoint filters are not applied

        Returns:
            BuildResult with payload and dropdown taxonomies
        """
        if self.tree.is_empty():
            logger.debug("[GraphBuilder] empty store, nothing to build")
            empty = FlattenResult()
            return BuildResult(
                payload=GraphPayload(),
                type_options=self.type_options(),
                combined_options=self.combined_options(empty),
                flatten=empty,
            )

        ignored = {normalize_relation(t) for t in ignore_types}
        flat = self.flattener.flatten(self.tree.roots())

        edges = self._collect_edges(flat, ignored)

        selectors = [EndpointSelector.parse(filter_a), EndpointSelector.parse(filter_b)]
        if not show_all and any(s.is_active for s in selectors):
            edges = self._filter_edges(edges, [s for s in selectors if s.is_active])

        nodes = self._materialize_nodes(edges, flat)
        reversed_edges = [
            GraphEdge(source=e.target, target=e.source, relation=e.relation, weight=e.weight)
            for e in edges
        ]

        result = BuildResult(
            payload=GraphPayload(nodes=nodes, edges=reversed_edges),
            type_options=self.type_options(),
            combined_options=self.combined_options(flat),
            flatten=flat,
        )
        logger.debug(
            "[GraphBuilder] built %d nodes / %d edges (ignored=%s)",
            result.node_count, result.edge_count, sorted(ignored),
        )
        return result

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def _resolve(self, doc: Document, flat: FlattenResult) -> str:
        """Effective endpoint identity: group id for grouped standards."""
        if doc.is_standard and doc.id in flat.group_map:
            return flat.group_map[doc.id]
        return self.tree.store_key(doc)

    def _collect_edges(self, flat: FlattenResult, ignored: Set[str]) -> List[GraphEdge]:
        """Depth-first walk over all roots, one edge per canonical key."""
        traversal_seen: Set[str] = set()
        link_seen: Set[str] = set()
        edges: List[GraphEdge] = []

        for root in self.tree.roots():
            root_key = self.tree.store_key(root)
            if root_key in traversal_seen:
                continue
            traversal_seen.add(root_key)
            stack: List[Tuple[Document, Iterator]] = [(root, iter(root.links))]

            while stack:
                node, links = stack[-1]
                link = next(links, None)
                if link is None:
                    stack.pop()
                    continue

                target = link.document
                if target is None:
                    logger.debug("[GraphBuilder] dropping link from %s with no document", node.id)
                    continue
                if normalize_relation(link.ltype) in ignored:
                    continue

                source_key = self._resolve(node, flat)
                target_key = self._resolve(target, flat)
                key = edge_key(source_key, target_key, link.ltype)
                if key not in link_seen:
                    link_seen.add(key)
                    edges.append(GraphEdge(
                        source=source_key,
                        target=target_key,
                        relation=link.ltype,
                        weight=GraphEdge.weight_for(link.ltype),
                    ))

                # Walk continues through individual standards
                next_key = self.tree.store_key(target)
                if next_key not in traversal_seen:
                    traversal_seen.add(next_key)
                    stack.append((target, iter(target.links)))

        return edges

    # -------------------------------------------------------------------------
    # Endpoint filter
    # -------------------------------------------------------------------------

    def _lookup_endpoint(self, node_id: str) -> Optional[Document]:
        if is_grouped_id(node_id):
            return self.tree.get(node_id) or make_placeholder(node_id)
        return self.tree.get(node_id)

    def _filter_edges(
        self,
        edges: List[GraphEdge],
        selectors: List[EndpointSelector],
    ) -> List[GraphEdge]:
        """Keep edges where any endpoint matches any active selector."""
        kept: List[GraphEdge] = []
        for edge in edges:
            source = self._lookup_endpoint(edge.source)
            target = self._lookup_endpoint(edge.target)
            if source is None or target is None:
                continue
            if any(s.matches(doc) for s in selectors for doc in (source, target)):
                kept.append(edge)
        logger.debug("[GraphBuilder] endpoint filter kept %d of %d edges", len(kept), len(edges))
        return kept

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def _materialize_nodes(self, edges: List[GraphEdge], flat: FlattenResult) -> List[GraphNode]:
        """
        Derive nodes from edge endpoints.

        First sighting creates the node (size 1, or member count for a
        group); every later sighting adds 1 to its size.
        """
        nodes: Dict[str, GraphNode] = {}

        def add(node_id: str) -> None:
            existing = nodes.get(node_id)
            if existing is not None:
                existing.size += 1
                return

            if is_grouped_id(node_id):
                members = flat.members(node_id)
                nodes[node_id] = GraphNode(
                    id=node_id,
                    name=base_from_grouped(node_id),
                    doc_type=DocType.STANDARD,
                    size=len(members) or 1,
                    original_documents=list(members),
                )
            else:
                stored = self.tree.get(node_id)
                nodes[node_id] = GraphNode(
                    id=node_id,
                    name=stored.name if stored else node_id,
                    doc_type=stored.doc_type if stored else DocType.UNKNOWN,
                )

        for edge in edges:
            add(edge.source)
            add(edge.target)

        return list(nodes.values())

    # -------------------------------------------------------------------------
    # Dropdown taxonomies (always from the unfiltered store)
    # -------------------------------------------------------------------------

    def _cre_documents(self) -> List[Document]:
        return [d for d in self.tree.documents() if d.doc_type == DocType.CRE]

    def type_options(self) -> List[DropdownOption]:
        """Options for the type-based selector."""
        options = [
            DropdownOption(key="none_typeA", text="None", value=""),
            DropdownOption(key="all_cre", text="ALL CREs", value="all_cre"),
        ]
        options.extend(
            DropdownOption(key=d.id, text=d.name, value=d.id)
            for d in self._cre_documents()
        )
        return options

    def combined_options(self, flat: FlattenResult) -> List[DropdownOption]:
        """Options for the group/mixed selector."""
        options = [
            DropdownOption(key="none_typeB", text="None", value=""),
            DropdownOption(key="all_standard", text="ALL Standards", value="all_standard"),
            DropdownOption(key="separator1", text="─ Standards ─", value="", disabled=True),
        ]
        options.extend(flat.group_options)
        options.append(DropdownOption(key="separator2", text="─ CREs ─", value="", disabled=True))
        options.append(DropdownOption(key="all_cre_right", text="ALL CREs", value="all_cre"))
        options.extend(
            DropdownOption(key=f"{d.id}_right", text=d.name, value=d.id)
            for d in self._cre_documents()
        )
        return options
