"""
Tree source port interface.

Defines the contract for the document tree the graph is derived from.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain.models import Document


class TreeSourcePort(ABC):
    """
    Abstract interface for the hierarchical document tree.

    Implementations expose the root documents, a stable per-document key
    used to detect revisits, and a flat key -> document store.
    """

    @abstractmethod
    def roots(self) -> List[Document]:
        """Get the root document collection."""
        pass

    @abstractmethod
    def store_key(self, doc: Document) -> str:
        """Get the stable key for a document."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[Document]:
        """Look up a document by its store key."""
        pass

    @abstractmethod
    def documents(self) -> List[Document]:
        """Get every document in the flat store, in insertion order."""
        pass

    def is_empty(self) -> bool:
        return not self.documents()
