"""
In-memory tree source.

Loads the document tree from JSON in either of two layouts:

Nested (as served by the explorer API)::

    [{"id": "CRE-1", "displayName": "...", "doctype": "CRE",
      "links": [{"ltype": "Contains", "document": {...}}]}]

Flat (allows cycles)::

    {"documents": [{"id": "A", "doctype": "CRE",
                    "links": [{"ltype": "Related", "target": "B"}]}],
     "roots": ["A"]}
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..domain.models import Document, Link
from ..ports.tree_port import TreeSourcePort

logger = logging.getLogger(__name__)


class TreeLoadError(ValueError):
    """The tree JSON could not be read or has an unknown layout."""


def default_store_key(doc: Document) -> str:
    return doc.id


class InMemoryTreeSource(TreeSourcePort):
    """
    Tree source backed by Document objects held in memory.

    The flat store is built by walking every root once (first document
    seen for a key wins).
    """

    def __init__(
        self,
        roots: List[Document],
        store_key: Callable[[Document], str] = default_store_key,
    ):
        """
        Initialize the source.

        Args:
            roots: Root documents
            store_key: Stable key function used for revisit detection and lookup
        """
        self._roots = list(roots)
        self._key_fn = store_key
        self._store: Dict[str, Document] = {}
        self._index()

    def _index(self) -> None:
        stack = list(reversed(self._roots))
        while stack:
            doc = stack.pop()
            key = self._key_fn(doc)
            if key in self._store:
                continue
            self._store[key] = doc
            for link in reversed(doc.links):
                if link.document is not None:
                    stack.append(link.document)

    # -------------------------------------------------------------------------
    # TreeSourcePort
    # -------------------------------------------------------------------------

    def roots(self) -> List[Document]:
        return list(self._roots)

    def store_key(self, doc: Document) -> str:
        return self._key_fn(doc)

    def get(self, key: str) -> Optional[Document]:
        return self._store.get(key)

    def documents(self) -> List[Document]:
        return list(self._store.values())

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_json(cls, path: Union[str, Path], **kwargs) -> "InMemoryTreeSource":
        """Load a tree from a JSON file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise TreeLoadError(f"Cannot read tree from {path}: {e}") from e
        return cls.from_data(data, **kwargs)

    @classmethod
    def from_data(cls, data: Any, **kwargs) -> "InMemoryTreeSource":
        """Build a tree from already-decoded JSON data."""
        if isinstance(data, list):
            roots = [_parse_nested(item) for item in data]
        elif isinstance(data, dict) and "documents" in data:
            roots = _parse_flat(data)
        else:
            raise TreeLoadError(
                "Tree data must be a list of documents or a mapping with 'documents'"
            )

        source = cls(roots, **kwargs)
        logger.info(
            "[TreeSource] loaded %d roots, %d documents",
            len(source._roots), len(source._store),
        )
        return source


def _document_fields(item: Dict[str, Any]) -> Document:
    doc_id = str(item.get("id", ""))
    name = item.get("displayName") or item.get("name") or doc_id
    return Document(id=doc_id, name=name, doctype=item.get("doctype") or "")


def _parse_nested(item: Dict[str, Any]) -> Document:
    """Nested layout; documents inline their link targets."""
    root = _document_fields(item)
    stack = [(root, item)]
    while stack:
        doc, raw = stack.pop()
        for raw_link in raw.get("links") or []:
            raw_target = raw_link.get("document")
            target = _document_fields(raw_target) if raw_target else None
            doc.links.append(Link(ltype=raw_link.get("ltype", ""), document=target))
            if target is not None:
                stack.append((target, raw_target))
    return root


def _parse_flat(data: Dict[str, Any]) -> List[Document]:
    """Flat layout; links name their target id."""
    by_id: Dict[str, Document] = {}
    raw_by_id: Dict[str, Dict[str, Any]] = {}
    for item in data.get("documents") or []:
        doc = _document_fields(item)
        by_id.setdefault(doc.id, doc)
        raw_by_id.setdefault(doc.id, item)

    for doc_id, raw in raw_by_id.items():
        doc = by_id[doc_id]
        for raw_link in raw.get("links") or []:
            target_id = str(raw_link.get("target", ""))
            target = by_id.get(target_id)
            if target is None:
                logger.debug("[TreeSource] %s links to unknown %r", doc_id, target_id)
            doc.links.append(Link(ltype=raw_link.get("ltype", ""), document=target))

    root_ids = data.get("roots")
    if root_ids is None:
        return list(by_id.values())
    return [by_id[str(r)] for r in root_ids if str(r) in by_id]
