"""
Tree Flattener - collects standards and folds them into family groups.

Standards whose ids share a base name ("ISO 27001:2013" and
"ISO 27001:2022" -> "ISO 27001") are collapsed into a single synthetic
group node so near-duplicate documents don't clutter the graph.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Set

from ..domain.models import Document, DropdownOption, Link

logger = logging.getLogger(__name__)


GROUP_PREFIX = "grouped_"
BASE_NAME_DELIMITER = ":"


def base_name(document_id: str) -> str:
    """Family name of a standard: the id up to the first delimiter."""
    return document_id.split(BASE_NAME_DELIMITER)[0]


def grouped_id(base: str) -> str:
    """Synthetic group identity for a family base name."""
    return f"{GROUP_PREFIX}{base}"


def is_grouped_id(node_id: str) -> bool:
    return node_id.startswith(GROUP_PREFIX)


def base_from_grouped(node_id: str) -> str:
    """Inverse of grouped_id()."""
    return node_id[len(GROUP_PREFIX):] if is_grouped_id(node_id) else node_id


@dataclass
class FlattenResult:
    """Output of a flattening pass."""
    raw_standards: List[Document] = field(default_factory=list)       # One entry per reaching link
    groups: Dict[str, List[Document]] = field(default_factory=dict)   # base -> distinct members
    group_map: Dict[str, str] = field(default_factory=dict)           # original id -> grouped id
    group_options: List[DropdownOption] = field(default_factory=list)

    def members(self, group_id: str) -> List[Document]:
        """Distinct members of a group, by grouped id."""
        return self.groups.get(base_from_grouped(group_id), [])

    def path_multiplicity(self, base: str) -> int:
        """How many times the family was reached, counting every reaching link."""
        return sum(1 for doc in self.raw_standards if base_name(doc.id) == base)


class TreeFlattener:
    """
    Walks the source tree and applies the standard grouping rule.

    Each document is expanded at most once per root, keyed on its store
    key, so cyclic stores cost time linear in their links. A standard is
    collected once for every link that reaches it: a document reached by
    two links appears twice in raw_standards.
    """

    def __init__(self, store_key: Optional[Callable[[Document], str]] = None):
        """
        Initialize the flattener.

        Args:
            store_key: Stable identity used for revisit detection (default: doc.id)
        """
        self._key = store_key or _document_id

    def flatten(self, roots: List[Document]) -> FlattenResult:
        """
        Flatten the tree rooted at roots.

        Args:
            roots: Root document collection

        Returns:
            FlattenResult with raw standards, groups, mapping and options
        """
        result = FlattenResult()

        for root in roots:
            if not root.links:
                # Isolated roots can never produce an edge
                continue
            result.raw_standards.extend(self.collect_standards(root))

        member_ids: Dict[str, Set[str]] = {}
        for doc in result.raw_standards:
            base = base_name(doc.id)
            seen_ids = member_ids.setdefault(base, set())
            if doc.id not in seen_ids:
                seen_ids.add(doc.id)
                result.groups.setdefault(base, []).append(doc)

        for base, members in result.groups.items():
            gid = grouped_id(base)
            for doc in members:
                result.group_map[doc.id] = gid
            result.group_options.append(DropdownOption(
                key=gid,
                text=f"{base} ({len(members)})",
                value=gid,
            ))

        logger.debug(
            "[TreeFlattener] %d standards reached, %d groups",
            len(result.raw_standards), len(result.groups),
        )
        return result

    def collect_standards(self, root: Document) -> List[Document]:
        """
        Collect every standard reachable from root, once per reaching link.

        Pre-order, links in declared order. The root counts once if it is
        itself a standard.
        """
        standards: List[Document] = [root] if root.is_standard else []
        expanded: Set[str] = {self._key(root)}
        stack: List[Iterator[Link]] = [iter(root.links)]

        while stack:
            link = next(stack[-1], None)
            if link is None:
                stack.pop()
                continue

            target = link.document
            if target is None:
                continue
            if target.is_standard:
                standards.append(target)

            key = self._key(target)
            if key not in expanded:
                expanded.add(key)
                stack.append(iter(target.links))

        return standards


def _document_id(doc: Document) -> str:
    return doc.id
