"""
Request context for query processing.

A fresh RequestContext is built for every HTTP request and every
subscription connection, and handed to graphql-core as ``context_value``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..messaging.bus import NotificationBus
from ..store.base import Document, DocumentStore

logger = logging.getLogger(__name__)

CONNECTION_CREDENTIAL_KEYS = ("Authorization", "authorization")


@dataclass
class RequestContext:
    """
    Context passed through query execution.

    Contains:
    - store: Document store handle
    - current_user: Resolved user document, or None when unauthenticated
    - notify: Notification bus for publishing and subscribing
    """
    store: DocumentStore
    current_user: Optional[Document]
    notify: NotificationBus

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def login(self) -> Optional[str]:
        return self.current_user.get("githubLogin") if self.current_user else None


class ContextBuilder:
    """
    Derives the per-request principal from a credential token.

    Usage:
        builder = ContextBuilder(store, bus)
        context = await builder.build(request.headers.get("Authorization"))
    """

    def __init__(self, store: DocumentStore, bus: NotificationBus):
        self.store = store
        self.bus = bus

    async def build(self, credential: Optional[str] = None) -> RequestContext:
        """
        Build a context for the given credential.

        An absent or unknown credential yields an unauthenticated context;
        store failures propagate as StoreUnavailable.
        """
        current_user = None
        if credential:
            current_user = await self.store.users.find_one({"githubToken": credential})
            if current_user is None:
                logger.debug("Credential did not match any user")

        return RequestContext(store=self.store, current_user=current_user, notify=self.bus)

    async def build_for_connection(
        self, connection_params: Optional[Mapping[str, Any]]
    ) -> RequestContext:
        """Build a context from a streaming connection's init payload."""
        credential = None
        for key in CONNECTION_CREDENTIAL_KEYS:
            if connection_params and connection_params.get(key):
                credential = connection_params[key]
                break
        return await self.build(credential)
