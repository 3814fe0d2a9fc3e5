"""Tests for relationship resolvers."""

import asyncio

from photoshare.resolvers.relations import (
    photo_id,
    photo_owner,
    photo_tagged_users,
    photo_url,
    user_in_photos,
    user_posted_photos,
)
from tests.conftest import TAGS, make_context


def _logins(users):
    return [user["githubLogin"] if user else None for user in users]


def test_photo_owner_matches_user_id(seeded_store, bus) -> None:
    context = make_context(seeded_store, bus)

    async def scenario():
        photo = await seeded_store.photos.find_one({"_id": "photo-3"})
        return await photo_owner(photo, context)

    assert asyncio.run(scenario())["githubLogin"] == "bob"


def test_posted_photos_are_exactly_owned_photos(seeded_store, bus) -> None:
    context = make_context(seeded_store, bus)

    async def scenario():
        result = {}
        for user in await seeded_store.users.find():
            posted = await user_posted_photos(user, context)
            owned = await seeded_store.photos.find({"userID": user["githubLogin"]})
            result[user["githubLogin"]] = ({p["_id"] for p in posted}, {p["_id"] for p in owned})
        return result

    result = asyncio.run(scenario())

    assert result["alice"][0] == {"photo-1", "photo-2"}
    assert result["carol"][0] == set()
    for posted, owned in result.values():
        assert posted == owned


def test_tags_are_symmetric(seeded_store, bus) -> None:
    context = make_context(seeded_store, bus)

    async def scenario():
        pairs = []
        for tag in TAGS:
            photo = await seeded_store.photos.find_one({"_id": tag["photoID"]})
            user = await seeded_store.users.find_one({"githubLogin": tag["userID"]})
            tagged = await photo_tagged_users(photo, context)
            in_photos = await user_in_photos(user, context)
            pairs.append((tag, _logins(tagged), [p["_id"] for p in in_photos]))
        return pairs

    for tag, tagged_logins, photo_ids in asyncio.run(scenario()):
        assert tag["userID"] in tagged_logins
        assert tag["photoID"] in photo_ids


def test_tagged_users_keep_insertion_order_and_duplicates(seeded_store, bus) -> None:
    context = make_context(seeded_store, bus)

    async def scenario():
        await seeded_store.tags.insert_one({"photoID": "photo-1", "userID": "bob"})
        photo = await seeded_store.photos.find_one({"_id": "photo-1"})
        bob = await seeded_store.users.find_one({"githubLogin": "bob"})
        return await photo_tagged_users(photo, context), await user_in_photos(bob, context)

    tagged, bob_photos = asyncio.run(scenario())

    assert _logins(tagged) == ["bob", "carol", "bob"]
    assert [photo["_id"] for photo in bob_photos] == ["photo-1", "photo-1"]


def test_dangling_references_resolve_to_none(seeded_store, bus) -> None:
    context = make_context(seeded_store, bus)

    async def scenario():
        await seeded_store.tags.insert_one({"photoID": "photo-2", "userID": "ghost"})
        await seeded_store.tags.insert_one({"photoID": "gone", "userID": "carol"})
        photo = await seeded_store.photos.find_one({"_id": "photo-2"})
        carol = await seeded_store.users.find_one({"githubLogin": "carol"})
        orphan = {"_id": "orphan", "userID": "nobody"}
        return (
            await photo_tagged_users(photo, context),
            await user_in_photos(carol, context),
            await photo_owner(orphan, context),
        )

    tagged, carol_photos, owner = asyncio.run(scenario())

    assert tagged == [None]
    assert [photo["_id"] if photo else None for photo in carol_photos] == ["photo-1", None]
    assert owner is None


def test_photo_id_and_url() -> None:
    stored = {"_id": "abc123"}
    with_logical_id = {"_id": "abc123", "id": "7"}

    assert photo_id(stored) == "abc123"
    assert photo_id(with_logical_id) == "7"
    assert photo_url(stored) == "/img/photos/abc123.jpg"
