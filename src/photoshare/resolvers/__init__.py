"""
Resolvers module - resolver map keyed by (type, field).

Relationship and query functions take ``(entity, context)``; this module
adapts them to graphql-core's ``(source, info, **args)`` calling convention.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from ..messaging.bus import PHOTO_ADDED
from ..runtime.mutations import MutationPipeline
from . import queries
from .relations import (
    photo_id,
    photo_key,
    photo_owner,
    photo_tagged_users,
    photo_url,
    user_in_photos,
    user_posted_photos,
)


def _relation(func: Callable[[Any, Any], Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    async def resolve(source: Any, info: Any, **_args: Any) -> Any:
        return await func(source, info.context)

    resolve.__name__ = func.__name__
    return resolve


def build_resolver_map(pipeline: MutationPipeline) -> dict[tuple[str, str], Callable[..., Any]]:
    """Resolve functions for every non-trivial field."""
    return {
        # Query
        ("Query", "me"): lambda _root, info: queries.me(info.context),
        ("Query", "totalPhotos"): lambda _root, info: queries.total_photos(info.context),
        ("Query", "allPhotos"): lambda _root, info: queries.all_photos(info.context),
        ("Query", "totalUsers"): lambda _root, info: queries.total_users(info.context),
        ("Query", "allUsers"): lambda _root, info: queries.all_users(info.context),
        ("Query", "Photo"): lambda _root, info, id: queries.photo_by_id(info.context, id),
        ("Query", "User"): lambda _root, info, login: queries.user_by_login(info.context, login),
        # Mutation
        ("Mutation", "postPhoto"): lambda _root, info, input: pipeline.post_photo(
            info.context, input
        ),
        ("Mutation", "tagPhoto"): lambda _root, info, githubLogin, photoID: pipeline.tag_photo(
            info.context, photoID, githubLogin
        ),
        ("Mutation", "githubAuth"): lambda _root, info, code: pipeline.github_auth(
            info.context, code
        ),
        ("Mutation", "addFakeUsers"): lambda _root, info, count=1: pipeline.add_fake_users(
            info.context, count
        ),
        ("Mutation", "fakeUserAuth"): lambda _root, info, githubLogin: pipeline.fake_user_auth(
            info.context, githubLogin
        ),
        # Subscription payloads are the published photo itself
        ("Subscription", "newPhoto"): lambda photo, _info: photo,
        # Photo
        ("Photo", "id"): lambda photo, _info: photo_id(photo),
        ("Photo", "url"): lambda photo, _info: photo_url(photo),
        ("Photo", "postedBy"): _relation(photo_owner),
        ("Photo", "taggedUsers"): _relation(photo_tagged_users),
        # User
        ("User", "postedPhotos"): _relation(user_posted_photos),
        ("User", "inPhotos"): _relation(user_in_photos),
    }


def build_subscription_map() -> dict[tuple[str, str], Callable[..., Any]]:
    """Source stream functions for subscription fields."""
    return {
        ("Subscription", "newPhoto"): lambda _root, info: info.context.notify.subscribe(
            PHOTO_ADDED
        ),
    }


__all__ = [
    "build_resolver_map",
    "build_subscription_map",
    "photo_id",
    "photo_key",
    "photo_owner",
    "photo_tagged_users",
    "photo_url",
    "user_in_photos",
    "user_posted_photos",
]
