"""
SQLAlchemy-backed document store.

All collections share one ``documents`` table holding JSON payloads:
- seq: autoincrement key, preserves insertion order
- doc_id: store-issued ``_id``
- collection: collection name
- data: the document itself (without ``_id``)
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, AsyncIterator, Optional

from sqlalchemy import JSON, Integer, String, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..core.errors import StoreUnavailable
from .base import (
    Document,
    DocumentCollection,
    DocumentStore,
    Filter,
    matches,
    new_document_id,
)

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for store tables."""
    pass


class DocumentRow(Base):
    __tablename__ = "documents"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    doc_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    collection: Mapped[str] = mapped_column(String(32), index=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_dumps(value: Any) -> str:
    return json.dumps(value, default=_json_default)


class SQLCollection(DocumentCollection):
    """One logical collection inside the shared documents table."""

    def __init__(self, name: str, session_maker: async_sessionmaker[AsyncSession]):
        self.name = name
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_maker() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store error in {self.name}.{operation}: {e}")
            raise StoreUnavailable(f"{self.name}.{operation}", str(e)) from e

    def _where(self, filter: Optional[Filter]) -> tuple[list[Any], Filter]:
        """
        Split an equality filter into SQL clauses and a residual filter.

        String values are pushed down as JSON path comparisons; anything
        else is matched in Python after loading.
        """
        clauses: list[Any] = [DocumentRow.collection == self.name]
        residual: Filter = {}

        for key, value in (filter or {}).items():
            if key == "_id":
                clauses.append(DocumentRow.doc_id == str(value))
            elif isinstance(value, str):
                clauses.append(DocumentRow.data[key].as_string() == value)
            else:
                residual[key] = value

        return clauses, residual

    @staticmethod
    def _to_document(row: DocumentRow) -> Document:
        return {**row.data, "_id": row.doc_id}

    @staticmethod
    def _to_data(document: Document) -> dict[str, Any]:
        return {key: value for key, value in document.items() if key != "_id"}

    async def _matching_rows(
        self, session: AsyncSession, filter: Optional[Filter]
    ) -> list[DocumentRow]:
        clauses, residual = self._where(filter)
        stmt = select(DocumentRow).where(*clauses).order_by(DocumentRow.seq)
        rows = (await session.execute(stmt)).scalars().all()
        return [row for row in rows if matches(self._to_document(row), residual)]

    async def estimated_document_count(self) -> int:
        stmt = select(func.count()).select_from(DocumentRow).where(
            DocumentRow.collection == self.name
        )
        async with self._session("count") as session:
            return (await session.execute(stmt)).scalar_one()

    async def find(self, filter: Optional[Filter] = None) -> list[Document]:
        async with self._session("find") as session:
            rows = await self._matching_rows(session, filter)
            return [self._to_document(row) for row in rows]

    async def find_one(self, filter: Filter) -> Optional[Document]:
        async with self._session("find_one") as session:
            rows = await self._matching_rows(session, filter)
            return self._to_document(rows[0]) if rows else None

    async def insert_one(self, document: Document) -> str:
        ids = await self.insert_many([document])
        return ids[0]

    async def insert_many(self, documents: list[Document]) -> list[str]:
        rows = [
            DocumentRow(
                doc_id=str(doc.get("_id") or new_document_id()),
                collection=self.name,
                data=self._to_data(doc),
            )
            for doc in documents
        ]
        async with self._session("insert") as session:
            session.add_all(rows)
            await session.commit()
        return [row.doc_id for row in rows]

    async def replace_one(
        self, filter: Filter, document: Document, *, upsert: bool = False
    ) -> Optional[Document]:
        async with self._session("replace_one") as session:
            rows = await self._matching_rows(session, filter)
            if rows:
                row = rows[0]
                row.data = self._to_data(document)
            elif upsert:
                row = DocumentRow(
                    doc_id=str(document.get("_id") or new_document_id()),
                    collection=self.name,
                    data=self._to_data(document),
                )
                session.add(row)
            else:
                return None
            await session.commit()
            return self._to_document(row)


class SQLDocumentStore(DocumentStore):
    """
    Document store over any SQLAlchemy async database.

    Usage:
        store = SQLDocumentStore("postgresql+asyncpg://...")
        await store.init()
    """

    def __init__(self, database_url: str, *, echo: bool = False):
        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            json_serializer=_json_dumps,
        )
        self._session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.users = SQLCollection("users", self._session_maker)
        self.photos = SQLCollection("photos", self._session_maker)
        self.tags = SQLCollection("tags", self._session_maker)

    async def init(self) -> None:
        """Create tables."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StoreUnavailable("init", str(e)) from e
        logger.info("Document store tables ready")

    async def close(self) -> None:
        await self.engine.dispose()
