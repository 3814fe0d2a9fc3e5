"""
PhotoShare Gateway - main entry point for creating the gateway application.

Usage:
    from photoshare import Gateway, load_settings

    gateway = Gateway(load_settings("photoshare.yaml"))

    app = gateway.app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .api import create_graphql_router
from .config import Settings
from .core.guard import QueryShapeGuard
from .core.schema import build_photoshare_schema
from .messaging.bus import NotificationBus
from .playground import mount_playground
from .resolvers import build_resolver_map, build_subscription_map
from .runtime.context import ContextBuilder
from .runtime.executor import GraphExecutor
from .runtime.identity import (
    GitHubIdentityProvider,
    IdentityProvider,
    PeopleSource,
    RandomUserClient,
)
from .runtime.mutations import MutationPipeline
from .store import DocumentStore, create_store
from .websocket import create_websocket_router

logger = logging.getLogger(__name__)


class HealthcheckLogFilter(logging.Filter):
    """Filter out noisy healthcheck logs."""

    FILTERED_PATHS = ("/health",)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for path in self.FILTERED_PATHS:
            if f'"{path}' in message or f" {path} " in message:
                return False
        return True


def _setup_logging_filter():
    """Add filter to uvicorn access logger to suppress healthcheck logs."""
    uvicorn_access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, HealthcheckLogFilter) for f in uvicorn_access.filters):
        uvicorn_access.addFilter(HealthcheckLogFilter())


class Gateway:
    """
    PhotoShare Gateway.

    Owns every long-lived component:
    - Document store and notification bus
    - Context builder, mutation pipeline and executor
    - Query shape guard configured from settings
    - FastAPI app with HTTP, WebSocket and playground endpoints
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        store: Optional[DocumentStore] = None,
        identity_provider: Optional[IdentityProvider] = None,
        people_source: Optional[PeopleSource] = None,
    ):
        """
        Initialize gateway.

        Args:
            settings: Gateway settings (default: from environment)
            store: Document store (default: built from settings.database_url)
            identity_provider: OAuth provider (default: GitHub)
            people_source: Source of fake users (default: randomuser.me)
        """
        self.settings = settings or Settings()

        self.store = store if store is not None else create_store(self.settings.database_url)
        self.bus = NotificationBus()
        self.context_builder = ContextBuilder(self.store, self.bus)

        if identity_provider is None:
            identity_provider = GitHubIdentityProvider(
                self.settings.github_client_id,
                self.settings.github_client_secret,
            )
        self.identity_provider = identity_provider
        self.people_source = people_source if people_source is not None else RandomUserClient()
        self.pipeline = MutationPipeline(self.identity_provider, self.people_source)

        self.schema = build_photoshare_schema(
            build_resolver_map(self.pipeline),
            build_subscription_map(),
        )
        self.guard = QueryShapeGuard(
            self.schema,
            max_depth=self.settings.max_depth,
            max_cost=self.settings.max_cost,
            scalar_cost=self.settings.scalar_cost,
            object_cost=self.settings.object_cost,
            list_factor=self.settings.list_factor,
            field_weights=self.settings.field_weights,
        )
        self.executor = GraphExecutor(self.schema, self.guard)
        self.ws_router = create_websocket_router(self.context_builder, self.executor)

        # Create FastAPI app
        self.app = self._create_app()

        # Store reference to gateway on app for request handlers
        self.app.state.gateway = self

    async def startup(self) -> None:
        _setup_logging_filter()
        await self.store.init()
        logger.info(f"{self.settings.title} ready")

    async def shutdown(self) -> None:
        self.bus.close()
        await self.identity_provider.close()
        await self.people_source.close()
        await self.store.close()
        logger.info(f"{self.settings.title} stopped")

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self.startup()
            yield
            await self.shutdown()

        app = FastAPI(
            title=self.settings.title,
            description="PhotoShare GraphQL API",
            version="1.0.0",
            lifespan=lifespan,
        )

        # CORS
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.include_router(create_graphql_router(self.settings.graphql_path))

        # Subscriptions share the GraphQL path
        @app.websocket(self.settings.graphql_path)
        async def websocket_endpoint(websocket: WebSocket):
            await self.ws_router.handle_connection(websocket)

        # Mount playground
        if self.settings.playground:
            mount_playground(
                app,
                path=self.settings.playground_path,
                endpoint=self.settings.graphql_path,
            )

        return app
