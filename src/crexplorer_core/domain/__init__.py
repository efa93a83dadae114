"""
Domain models for crexplorer.

Contains DTOs, enums, and data structures used throughout the application.
"""

from .models import (
    Link,
    Document,
    GraphNode,
    GraphEdge,
    GraphPayload,
    DropdownOption,
    edge_key,
)
from .enums import (
    DocType,
    RelationType,
    FocusPhase,
    normalize_relation,
)

__all__ = [
    # Models
    "Link",
    "Document",
    "GraphNode",
    "GraphEdge",
    "GraphPayload",
    "DropdownOption",
    "edge_key",
    # Enums
    "DocType",
    "RelationType",
    "FocusPhase",
    "normalize_relation",
]
