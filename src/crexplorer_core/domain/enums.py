"""
Enumerations for the crexplorer domain.
"""

from enum import Enum


class DocType(str, Enum):
    """Document families shown in the explorer graph."""
    STANDARD = "standard"   # Grouped into family nodes
    CRE = "cre"             # Common Requirement Enumeration entries
    TOOL = "tool"
    UNKNOWN = "unknown"     # Anything else, including missing store entries

    @classmethod
    def from_label(cls, label: str) -> "DocType":
        """Map a free-form doctype label ("CRE", "Standard", ...) to a DocType."""
        value = (label or "").strip().lower()
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN


class RelationType(str, Enum):
    """Link relation vocabulary (normalized form)."""
    CONTAINS = "contains"
    RELATED = "related"
    LINKED_TO = "linked to"
    SAME = "same"
    EXTENSIBLE = "extensible"


def normalize_relation(label: str) -> str:
    """
    Normalize a relation label for comparisons and keys.

    "Contains" -> "contains", "Linked-To" -> "linked to".
    Labels outside the vocabulary are normalized the same way and kept.
    """
    value = (label or "").strip().lower()
    return value.replace("-", " ").replace("_", " ")


class FocusPhase(str, Enum):
    """Phases of the hover spotlight state machine."""
    IDLE = "idle"
    PENDING = "pending"
    FOCUSED = "focused"
