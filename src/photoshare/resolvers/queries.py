"""Root query resolvers."""

from __future__ import annotations

from typing import Optional

from ..runtime.context import RequestContext
from ..store.base import Document


def me(context: RequestContext) -> Optional[Document]:
    return context.current_user


async def total_photos(context: RequestContext) -> int:
    return await context.store.photos.estimated_document_count()


async def all_photos(context: RequestContext) -> list[Document]:
    return await context.store.photos.find()


async def total_users(context: RequestContext) -> int:
    return await context.store.users.estimated_document_count()


async def all_users(context: RequestContext) -> list[Document]:
    return await context.store.users.find()


async def photo_by_id(context: RequestContext, photo_id: str) -> Optional[Document]:
    return await context.store.photos.find_one({"_id": photo_id})


async def user_by_login(context: RequestContext, login: str) -> Optional[Document]:
    return await context.store.users.find_one({"githubLogin": login})
