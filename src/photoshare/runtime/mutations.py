"""
Mutation pipeline.

Every mutation is a single-shot transition backed by one store write:
- post_photo: insert photo, then publish it on ``photo-added``
- tag_photo: insert a tag row, then read the photo back
- github_auth: code exchange, then upsert the user
- add_fake_users / fake_user_auth: seeding helpers
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..core.errors import ExternalAuthFailure, NotFound, Unauthorized
from ..messaging.bus import PHOTO_ADDED
from ..store.base import Document
from .context import RequestContext
from .identity import AuthFailure, IdentityProvider, PeopleSource, person_to_user

logger = logging.getLogger(__name__)


class MutationPipeline:
    """
    Write operations and their side effects.

    Usage:
        pipeline = MutationPipeline(identity_provider, people_source)
        photo = await pipeline.post_photo(context, {"name": "sunset"})
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        people_source: PeopleSource,
    ):
        self.identity_provider = identity_provider
        self.people_source = people_source

    async def post_photo(self, context: RequestContext, photo_input: dict[str, Any]) -> Document:
        """
        Store a new photo owned by the current user and announce it.

        Raises:
            Unauthorized: If the request has no current user
        """
        if not context.is_authenticated:
            raise Unauthorized("only an authorized user can post a photo")

        photo = {
            **photo_input,
            "userID": context.login,
            "created": datetime.now(timezone.utc),
        }
        photo["_id"] = await context.store.photos.insert_one(photo)
        logger.info(f"Photo {photo['_id']} posted by {context.login}")

        # The photo is already stored, so a failed publish only costs the live update
        try:
            await context.notify.publish(PHOTO_ADDED, photo)
        except Exception as e:
            logger.error(f"Failed to publish {PHOTO_ADDED} for {photo['_id']}: {e}", exc_info=True)

        return photo

    async def tag_photo(
        self, context: RequestContext, photo_id: str, github_login: str
    ) -> Optional[Document]:
        """
        Record that a user appears in a photo.

        Duplicate tags are not checked for.

        Raises:
            Unauthorized: If the request has no current user
        """
        if not context.is_authenticated:
            raise Unauthorized("only an authorized user can tag a photo")

        await context.store.tags.insert_one({"photoID": photo_id, "userID": github_login})
        logger.info(f"{context.login} tagged {github_login} in photo {photo_id}")

        return await context.store.photos.find_one({"_id": photo_id})

    async def github_auth(self, context: RequestContext, code: str) -> dict[str, Any]:
        """
        Exchange a GitHub authorization code and upsert the user.

        Raises:
            ExternalAuthFailure: If the provider rejects the code
        """
        result = await self.identity_provider.authorize(code)
        if isinstance(result, AuthFailure):
            logger.warning(f"GitHub auth rejected: {result.message}")
            raise ExternalAuthFailure(result.message)

        latest_user_info = {
            "name": result.name,
            "githubLogin": result.login,
            "githubToken": result.access_token,
            "avatar": result.avatar_url,
        }
        user = await context.store.users.replace_one(
            {"githubLogin": result.login}, latest_user_info, upsert=True
        )
        logger.info(f"User {result.login} authorized via GitHub")

        return {"user": user, "token": result.access_token}

    async def add_fake_users(self, context: RequestContext, count: int = 1) -> list[Document]:
        """Seed the store with generated users."""
        people = await self.people_source.fetch(count)
        users = [person_to_user(person) for person in people]
        if users:
            ids = await context.store.users.insert_many(users)
            for user, user_id in zip(users, ids):
                user["_id"] = user_id

        logger.info(f"Added {len(users)} fake users")
        return users

    async def fake_user_auth(self, context: RequestContext, github_login: str) -> dict[str, Any]:
        """
        Issue the stored token of an existing user.

        Raises:
            NotFound: If no user has that login
        """
        user = await context.store.users.find_one({"githubLogin": github_login})
        if user is None:
            raise NotFound(f'Cannot find user with githubLogin "{github_login}"')

        return {"token": user["githubToken"], "user": user}
