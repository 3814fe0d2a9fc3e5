"""
Document store boundary.

The gateway treats storage as three flat collections of JSON-like documents
(``users``, ``photos``, ``tags``) supporting equality lookups only.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from typing import Any, Optional

Document = dict[str, Any]
Filter = dict[str, Any]


def new_document_id() -> str:
    """Generate a store identifier (24 hex chars, ObjectId-sized)."""
    return secrets.token_hex(12)


def matches(document: Document, filter: Optional[Filter]) -> bool:
    """Equality match of every filter key against the document."""
    if not filter:
        return True
    return all(document.get(key) == value for key, value in filter.items())


class DocumentCollection(ABC):
    """A single named collection of documents."""

    name: str

    @abstractmethod
    async def estimated_document_count(self) -> int:
        ...

    @abstractmethod
    async def find(self, filter: Optional[Filter] = None) -> list[Document]:
        """Return every matching document in insertion order."""

    @abstractmethod
    async def find_one(self, filter: Filter) -> Optional[Document]:
        """Return the first matching document or None."""

    @abstractmethod
    async def insert_one(self, document: Document) -> str:
        """Insert a document and return its store-issued ``_id``."""

    @abstractmethod
    async def insert_many(self, documents: list[Document]) -> list[str]:
        ...

    @abstractmethod
    async def replace_one(
        self, filter: Filter, document: Document, *, upsert: bool = False
    ) -> Optional[Document]:
        """
        Replace the first matching document wholesale.

        The replaced document keeps its ``_id``. With ``upsert=True`` a new
        document is inserted when nothing matches.

        Returns:
            The stored document, or None if nothing matched and upsert is off.
        """


class DocumentStore(ABC):
    """Capability set exposing the three collections."""

    users: DocumentCollection
    photos: DocumentCollection
    tags: DocumentCollection

    async def init(self) -> None:
        """Prepare backing storage (no-op by default)."""

    async def close(self) -> None:
        """Release backing resources (no-op by default)."""
