"""
Relationship resolvers.

Each resolver is a plain async function ``(entity, context) -> related`` that
joins across the flat collections the store keeps. They run only when the
query selects the corresponding field.

Dangling references (a tag pointing at a deleted user, a photo whose owner
is gone) resolve to None rather than failing.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from ..runtime.context import RequestContext
from ..store.base import Document

PHOTO_URL_TEMPLATE = "/img/photos/{id}.jpg"


def photo_key(photo: Document) -> str:
    """Identifier tags use to reference a photo."""
    return str(photo.get("_id") or photo.get("id"))


def photo_id(photo: Document) -> Any:
    """Client-supplied logical id wins over the store-assigned one."""
    return photo.get("id") or photo.get("_id")


def photo_url(photo: Document) -> str:
    return PHOTO_URL_TEMPLATE.format(id=photo.get("_id"))


async def photo_owner(photo: Document, context: RequestContext) -> Optional[Document]:
    return await context.store.users.find_one({"githubLogin": photo.get("userID")})


async def photo_tagged_users(
    photo: Document, context: RequestContext
) -> list[Optional[Document]]:
    """Users tagged in a photo, in tag insertion order, duplicates kept."""
    tags = await context.store.tags.find({"photoID": photo_key(photo)})
    logins = [tag.get("userID") for tag in tags]
    return list(
        await asyncio.gather(
            *(context.store.users.find_one({"githubLogin": login}) for login in logins)
        )
    )


async def user_posted_photos(user: Document, context: RequestContext) -> list[Document]:
    return await context.store.photos.find({"userID": user.get("githubLogin")})


async def user_in_photos(
    user: Document, context: RequestContext
) -> list[Optional[Document]]:
    """Photos a user is tagged in, in tag insertion order, duplicates kept."""
    tags = await context.store.tags.find({"userID": user.get("githubLogin")})
    photo_ids = [tag.get("photoID") for tag in tags]
    return list(
        await asyncio.gather(
            *(context.store.photos.find_one({"_id": pid}) for pid in photo_ids)
        )
    )
