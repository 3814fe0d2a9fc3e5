"""
Store module - document store boundary and implementations.
"""

from __future__ import annotations

from typing import Optional

from .base import (
    Document,
    DocumentCollection,
    DocumentStore,
    Filter,
    new_document_id,
)
from .memory import InMemoryCollection, InMemoryDocumentStore
from .sql import SQLCollection, SQLDocumentStore


def create_store(database_url: Optional[str] = None) -> DocumentStore:
    """Build a store from a database URL; no URL means in-memory."""
    if database_url:
        return SQLDocumentStore(database_url)
    return InMemoryDocumentStore()


__all__ = [
    "Document",
    "Filter",
    "DocumentCollection",
    "DocumentStore",
    "InMemoryCollection",
    "InMemoryDocumentStore",
    "SQLCollection",
    "SQLDocumentStore",
    "create_store",
    "new_document_id",
]
