"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from fastapi.testclient import TestClient

from photoshare.config import Settings
from photoshare.gateway import Gateway
from photoshare.messaging import NotificationBus
from photoshare.runtime.context import ContextBuilder, RequestContext
from photoshare.runtime.identity import (
    AuthFailure,
    AuthResult,
    AuthSuccess,
    IdentityProvider,
    PeopleSource,
)
from photoshare.runtime.mutations import MutationPipeline
from photoshare.store import DocumentStore, InMemoryDocumentStore

BAD_CODE_MESSAGE = "The code passed is incorrect or expired."

USERS = [
    {"githubLogin": "alice", "name": "Alice", "avatar": "a.png", "githubToken": "alice-token"},
    {"githubLogin": "bob", "name": "Bob", "avatar": "b.png", "githubToken": "bob-token"},
    {"githubLogin": "carol", "name": "Carol", "avatar": "c.png", "githubToken": "carol-token"},
]

PHOTOS = [
    {"_id": "photo-1", "name": "Sunrise", "category": "LANDSCAPE", "userID": "alice",
     "created": "2024-05-01T06:00:00.000Z"},
    {"_id": "photo-2", "name": "Selfie", "category": "SELFIE", "userID": "alice",
     "created": "2024-05-02T12:00:00.000Z"},
    {"_id": "photo-3", "name": "Race", "category": "ACTION", "userID": "bob",
     "created": "2024-05-03T18:30:00.000Z"},
]

TAGS = [
    {"photoID": "photo-1", "userID": "bob"},
    {"photoID": "photo-1", "userID": "carol"},
    {"photoID": "photo-3", "userID": "alice"},
]


def make_person(username: str, first: str, last: str) -> dict[str, Any]:
    """A randomuser.me result entry."""
    return {
        "login": {"username": username, "sha1": f"{username}-sha1"},
        "name": {"first": first, "last": last},
        "picture": {"thumbnail": f"https://randomuser.me/{username}.jpg"},
    }


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider answering from a fixed code table."""

    accounts: dict[str, AuthSuccess] = field(default_factory=dict)
    codes: list[str] = field(default_factory=list)
    closed: bool = False

    async def authorize(self, code: str) -> AuthResult:
        self.codes.append(code)
        account = self.accounts.get(code)
        if account is None:
            return AuthFailure(message=BAD_CODE_MESSAGE)
        return account

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakePeopleSource(PeopleSource):
    """People source returning canned randomuser.me entries."""

    people: list[dict[str, Any]] = field(default_factory=list)
    requested: list[int] = field(default_factory=list)

    async def fetch(self, count: int) -> list[dict[str, Any]]:
        self.requested.append(count)
        return self.people[:count]


async def seed(store: DocumentStore) -> None:
    await store.users.insert_many([dict(user) for user in USERS])
    await store.photos.insert_many([dict(photo) for photo in PHOTOS])
    await store.tags.insert_many([dict(tag) for tag in TAGS])


def make_context(store, bus, user: dict[str, Any] | None = None) -> RequestContext:
    return RequestContext(store=store, current_user=user, notify=bus)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def seeded_store(store: InMemoryDocumentStore) -> InMemoryDocumentStore:
    asyncio.run(seed(store))
    return store


@pytest.fixture
def bus() -> NotificationBus:
    return NotificationBus()


@pytest.fixture
def context_builder(seeded_store, bus) -> ContextBuilder:
    return ContextBuilder(seeded_store, bus)


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider(
        accounts={
            "good-code": AuthSuccess(
                access_token="gh-token-1",
                login="octocat",
                name="The Octocat",
                avatar_url="https://github.com/octocat.png",
            ),
        }
    )


@pytest.fixture
def people_source() -> FakePeopleSource:
    return FakePeopleSource(
        people=[
            make_person("pinkfish", "Lena", "Holm"),
            make_person("bluebird", "Omar", "Diaz"),
        ]
    )


@pytest.fixture
def pipeline(identity_provider, people_source) -> MutationPipeline:
    return MutationPipeline(identity_provider, people_source)


@pytest.fixture
def gateway(seeded_store, identity_provider, people_source) -> Gateway:
    return Gateway(
        Settings(cors_origins=["http://localhost:3000"]),
        store=seeded_store,
        identity_provider=identity_provider,
        people_source=people_source,
    )


@pytest.fixture
def client(gateway):
    with TestClient(gateway.app) as test_client:
        yield test_client
