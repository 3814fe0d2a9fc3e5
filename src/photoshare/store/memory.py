"""In-memory document store used by default and in tests."""

from __future__ import annotations

from typing import Optional

from .base import (
    Document,
    DocumentCollection,
    DocumentStore,
    Filter,
    matches,
    new_document_id,
)


class InMemoryCollection(DocumentCollection):
    """List-backed collection; documents are copied on the way in and out."""

    def __init__(self, name: str):
        self.name = name
        self._documents: list[Document] = []

    async def estimated_document_count(self) -> int:
        return len(self._documents)

    async def find(self, filter: Optional[Filter] = None) -> list[Document]:
        return [dict(doc) for doc in self._documents if matches(doc, filter)]

    async def find_one(self, filter: Filter) -> Optional[Document]:
        for doc in self._documents:
            if matches(doc, filter):
                return dict(doc)
        return None

    async def insert_one(self, document: Document) -> str:
        stored = dict(document)
        stored.setdefault("_id", new_document_id())
        self._documents.append(stored)
        return stored["_id"]

    async def insert_many(self, documents: list[Document]) -> list[str]:
        return [await self.insert_one(doc) for doc in documents]

    async def replace_one(
        self, filter: Filter, document: Document, *, upsert: bool = False
    ) -> Optional[Document]:
        for index, existing in enumerate(self._documents):
            if matches(existing, filter):
                stored = {**document, "_id": existing["_id"]}
                self._documents[index] = stored
                return dict(stored)

        if not upsert:
            return None

        stored = dict(document)
        stored.setdefault("_id", new_document_id())
        self._documents.append(stored)
        return dict(stored)


class InMemoryDocumentStore(DocumentStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self) -> None:
        self.users = InMemoryCollection("users")
        self.photos = InMemoryCollection("photos")
        self.tags = InMemoryCollection("tags")
