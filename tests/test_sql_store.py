"""Tests for the SQLAlchemy document store, run against SQLite."""

import asyncio
from datetime import datetime, timezone

import pytest

from photoshare.core.errors import StoreUnavailable
from photoshare.messaging import NotificationBus
from photoshare.runtime.context import ContextBuilder
from photoshare.store import SQLDocumentStore, create_store
from photoshare.store.memory import InMemoryDocumentStore
from tests.conftest import seed


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'photos.db'}"


def test_create_store_picks_backend(database_url) -> None:
    assert isinstance(create_store(None), InMemoryDocumentStore)

    store = create_store(database_url)
    assert isinstance(store, SQLDocumentStore)
    asyncio.run(store.close())


def test_collections_round_trip(database_url) -> None:
    async def scenario():
        store = SQLDocumentStore(database_url)
        await store.init()
        try:
            await seed(store)
            photo_id = await store.photos.insert_one(
                {"name": "Night", "userID": "bob", "created": datetime(2024, 6, 1, tzinfo=timezone.utc)}
            )
            return {
                "users": await store.users.estimated_document_count(),
                "photos": await store.photos.estimated_document_count(),
                "alice_photos": [p["_id"] for p in await store.photos.find({"userID": "alice"})],
                "by_token": await store.users.find_one({"githubToken": "bob-token"}),
                "tags": await store.tags.find({"photoID": "photo-1"}),
                "new_photo": await store.photos.find_one({"_id": photo_id}),
                "missing": await store.users.find_one({"githubLogin": "nobody"}),
            }
        finally:
            await store.close()

    result = asyncio.run(scenario())

    assert result["users"] == 3
    assert result["photos"] == 4
    assert result["alice_photos"] == ["photo-1", "photo-2"]
    assert result["by_token"]["githubLogin"] == "bob"
    assert [tag["userID"] for tag in result["tags"]] == ["bob", "carol"]
    assert result["new_photo"]["created"] == "2024-06-01T00:00:00+00:00"
    assert len(result["new_photo"]["_id"]) == 24
    assert result["missing"] is None


def test_non_string_filters_match_in_python(database_url) -> None:
    async def scenario():
        store = SQLDocumentStore(database_url)
        await store.init()
        try:
            await store.photos.insert_many([{"name": "a", "rank": 1}, {"name": "b", "rank": 2}])
            return await store.photos.find({"rank": 2})
        finally:
            await store.close()

    assert [photo["name"] for photo in asyncio.run(scenario())] == ["b"]


def test_replace_one_and_upsert(database_url) -> None:
    async def scenario():
        store = SQLDocumentStore(database_url)
        await store.init()
        try:
            await seed(store)
            original = await store.users.find_one({"githubLogin": "alice"})
            replaced = await store.users.replace_one(
                {"githubLogin": "alice"}, {"githubLogin": "alice", "githubToken": "new"}
            )
            skipped = await store.users.replace_one(
                {"githubLogin": "dave"}, {"githubLogin": "dave"}
            )
            upserted = await store.users.replace_one(
                {"githubLogin": "dave"}, {"githubLogin": "dave", "githubToken": "d"}, upsert=True
            )
            return original, replaced, skipped, upserted, await store.users.estimated_document_count()
        finally:
            await store.close()

    original, replaced, skipped, upserted, count = asyncio.run(scenario())

    assert replaced == {"githubLogin": "alice", "githubToken": "new", "_id": original["_id"]}
    assert skipped is None
    assert upserted["githubToken"] == "d"
    assert count == 4


def test_context_lookup_over_sql(database_url) -> None:
    async def scenario():
        store = SQLDocumentStore(database_url)
        await store.init()
        try:
            await seed(store)
            context = await ContextBuilder(store, NotificationBus()).build("carol-token")
            return context.login
        finally:
            await store.close()

    assert asyncio.run(scenario()) == "carol"


def test_missing_tables_raise_store_unavailable(database_url) -> None:
    async def scenario():
        store = SQLDocumentStore(database_url)
        try:
            await store.users.find_one({"githubLogin": "alice"})
        finally:
            await store.close()

    with pytest.raises(StoreUnavailable) as exc_info:
        asyncio.run(scenario())

    assert exc_info.value.operation == "users.find_one"
