"""Tests for per-request context building."""

import asyncio

import pytest

from photoshare.core.errors import StoreUnavailable
from photoshare.runtime.context import ContextBuilder


class _UnavailableUsers:
    async def find_one(self, filter):  # type: ignore[no-untyped-def]
        raise StoreUnavailable("find_one", "connection refused")


class _UnavailableStore:
    users = _UnavailableUsers()


def test_build_resolves_user_from_token(context_builder, bus) -> None:
    context = asyncio.run(context_builder.build("alice-token"))

    assert context.is_authenticated
    assert context.login == "alice"
    assert context.current_user["name"] == "Alice"
    assert context.notify is bus


def test_build_without_credential_is_anonymous(context_builder) -> None:
    context = asyncio.run(context_builder.build(None))

    assert context.current_user is None
    assert not context.is_authenticated
    assert context.login is None


def test_build_with_unknown_token_is_anonymous(context_builder) -> None:
    context = asyncio.run(context_builder.build("no-such-token"))

    assert context.current_user is None


def test_build_does_not_write(context_builder, seeded_store) -> None:
    async def scenario() -> tuple[int, int]:
        before = await seeded_store.users.estimated_document_count()
        await context_builder.build("alice-token")
        await context_builder.build("unknown")
        after = await seeded_store.users.estimated_document_count()
        return before, after

    before, after = asyncio.run(scenario())

    assert before == after == 3


def test_build_for_connection_reads_authorization(context_builder) -> None:
    upper = asyncio.run(context_builder.build_for_connection({"Authorization": "bob-token"}))
    lower = asyncio.run(context_builder.build_for_connection({"authorization": "carol-token"}))
    missing = asyncio.run(context_builder.build_for_connection(None))

    assert upper.login == "bob"
    assert lower.login == "carol"
    assert missing.current_user is None


def test_store_failure_propagates(bus) -> None:
    builder = ContextBuilder(_UnavailableStore(), bus)  # type: ignore[arg-type]

    with pytest.raises(StoreUnavailable):
        asyncio.run(builder.build("alice-token"))


def test_anonymous_build_skips_store(bus) -> None:
    builder = ContextBuilder(_UnavailableStore(), bus)  # type: ignore[arg-type]

    context = asyncio.run(builder.build(""))

    assert context.current_user is None
