"""
Endpoint selectors for the graph's edge post-filter.

Dropdown values arrive as free text in one of three forms:
- "all_<type>"      every document of a doctype ("all_cre", "all_standard")
- "grouped_<base>"  every standard in a family (including its group node)
- anything else     one exact identity

An empty value means the selector is not set.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..domain.enums import DocType
from ..domain.models import Document
from .flattener import GROUP_PREFIX, base_name, base_from_grouped, is_grouped_id

logger = logging.getLogger(__name__)


ALL_PREFIX = "all_"


class SelectorKind(Enum):
    """Forms an endpoint selector can take."""
    NONE = "none"           # Not set
    ALL_OF_TYPE = "all"
    GROUP = "group"
    EXACT = "exact"
    INVALID = "invalid"     # Unparseable; matches nothing


@dataclass(frozen=True)
class EndpointSelector:
    """A parsed endpoint-filter value."""
    kind: SelectorKind
    argument: str = ""

    @classmethod
    def parse(cls, value: Optional[str]) -> "EndpointSelector":
        """Parse a dropdown value. Never raises."""
        if value is None or value == "":
            return cls(SelectorKind.NONE)

        text = value.strip()
        if not text:
            logger.debug("[Selector] blank value %r matches nothing", value)
            return cls(SelectorKind.INVALID, value)

        if text.startswith(ALL_PREFIX):
            doc_type = text[len(ALL_PREFIX):].strip().lower()
            if not doc_type:
                logger.debug("[Selector] %r has no type", value)
                return cls(SelectorKind.INVALID, value)
            return cls(SelectorKind.ALL_OF_TYPE, doc_type)

        if text.startswith(GROUP_PREFIX):
            base = text[len(GROUP_PREFIX):]
            if not base:
                logger.debug("[Selector] %r has no family", value)
                return cls(SelectorKind.INVALID, value)
            return cls(SelectorKind.GROUP, base)

        return cls(SelectorKind.EXACT, text)

    @property
    def is_active(self) -> bool:
        return self.kind != SelectorKind.NONE

    def matches(self, doc: Document) -> bool:
        """Check whether a document (or group placeholder) is selected."""
        if self.kind == SelectorKind.ALL_OF_TYPE:
            return (doc.doctype or "").lower() == self.argument
        if self.kind == SelectorKind.GROUP:
            return doc.is_standard and _family_of(doc) == self.argument
        if self.kind == SelectorKind.EXACT:
            return doc.id == self.argument
        return False


def _family_of(doc: Document) -> str:
    if is_grouped_id(doc.id):
        return base_from_grouped(doc.id)
    return base_name(doc.id)


def make_placeholder(group_id: str) -> Document:
    """Synthetic store entry for a group id that has no direct document."""
    base = base_from_grouped(group_id)
    return Document(id=group_id, name=base, doctype=DocType.STANDARD.value)
