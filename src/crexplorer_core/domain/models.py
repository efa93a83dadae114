"""
Domain models (DTOs) for crexplorer.

These are pure data classes with no Qt or rendering dependencies.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Set

from .enums import DocType, RelationType, normalize_relation


@dataclass(eq=False)
class Link:
    """An outgoing typed link from one document to another."""
    ltype: str                          # Relation label as delivered ("Contains", "Linked To")
    document: Optional["Document"]      # None = missing reference


@dataclass(eq=False)
class Document:
    """A document in the source tree."""
    id: str
    name: str
    doctype: str                        # Raw doctype label ("CRE", "Standard", ...)
    links: List[Link] = field(default_factory=list)

    @property
    def doc_type(self) -> DocType:
        return DocType.from_label(self.doctype)

    @property
    def is_standard(self) -> bool:
        return self.doc_type == DocType.STANDARD

    def __repr__(self) -> str:
        return f"Document(id={self.id!r}, doctype={self.doctype!r}, links={len(self.links)})"


def edge_key(source_id: str, target_id: str, relation: str) -> str:
    """
    Canonical edge identity.

    Endpoints are ordered so both directions of the same relation share
    one key; the relation is normalized.
    """
    low, high = sorted((source_id, target_id))
    return f"{low}::{high}::{normalize_relation(relation)}"


@dataclass(eq=False)
class GraphNode:
    """
    A node in the built graph.

    Identity fields are fixed once the build completes. x/y/z stay None
    until the simulation writes them.
    """
    id: str
    name: str
    doc_type: DocType
    size: int = 1
    original_documents: List[Document] = field(default_factory=list)

    # Position (written by the simulation)
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None

    @property
    def is_group(self) -> bool:
        return bool(self.original_documents)

    @property
    def member_count(self) -> int:
        """Number of distinct documents folded into this node."""
        return len(self.original_documents) or 1

    @property
    def has_position(self) -> bool:
        return all(
            v is not None and math.isfinite(v)
            for v in (self.x, self.y, self.z)
        )

    @property
    def label(self) -> str:
        return f"{self.name} ({self.size})"


@dataclass(frozen=True)
class GraphEdge:
    """An edge in the built graph."""
    source: str
    target: str
    relation: str       # Relation label as delivered
    weight: int = 1     # 2 for contains, 1 otherwise (rendering hint)

    @property
    def key(self) -> str:
        return edge_key(self.source, self.target, self.relation)

    @property
    def relation_type(self) -> str:
        return normalize_relation(self.relation)

    @staticmethod
    def weight_for(relation: str) -> int:
        return 2 if normalize_relation(relation) == RelationType.CONTAINS.value else 1


@dataclass
class GraphPayload:
    """Nodes and edges handed to the simulation."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def edge_keys(self) -> Set[str]:
        return {e.key for e in self.edges}

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_map(self) -> Dict[str, GraphNode]:
        return {n.id: n for n in self.nodes}

    @property
    def max_node_size(self) -> int:
        return max((n.size for n in self.nodes), default=1)

    def is_empty(self) -> bool:
        return not self.nodes


@dataclass(frozen=True)
class DropdownOption:
    """An entry of an endpoint-selection dropdown."""
    key: str
    text: str
    value: str
    disabled: bool = False
