"""
PhotoShare - GraphQL API for sharing and tagging photos.

Serves queries, mutations and live subscriptions over a document store:
- Per-request context derived from the Authorization token
- Lazy relationship resolvers between users, photos and tags
- Static depth/cost limits checked before execution
- In-process notification bus feeding the newPhoto subscription

Usage:
    from photoshare import Gateway, load_settings

    gateway = Gateway(load_settings())
    app = gateway.app
"""

from __future__ import annotations

from .config import Settings, load_settings
from .core import (
    ExternalAuthFailure,
    NotFound,
    PhotoShareError,
    QueryShape,
    QueryShapeGuard,
    ServiceError,
    StoreUnavailable,
    TYPE_DEFS,
    Unauthorized,
    ValidationRejected,
    build_photoshare_schema,
)
from .gateway import Gateway, HealthcheckLogFilter
from .messaging import PHOTO_ADDED, NotificationBus, Subscription
from .runtime import (
    AuthFailure,
    AuthSuccess,
    ContextBuilder,
    GitHubIdentityProvider,
    GraphExecutor,
    MutationPipeline,
    RandomUserClient,
    RequestContext,
)
from .store import DocumentStore, InMemoryDocumentStore, SQLDocumentStore, create_store

__version__ = "0.1.0"

__all__ = [
    # Gateway
    "Gateway",
    "HealthcheckLogFilter",
    "Settings",
    "load_settings",
    # Core
    "TYPE_DEFS",
    "build_photoshare_schema",
    "QueryShape",
    "QueryShapeGuard",
    # Errors
    "PhotoShareError",
    "Unauthorized",
    "NotFound",
    "ExternalAuthFailure",
    "ValidationRejected",
    "StoreUnavailable",
    "ServiceError",
    # Runtime
    "RequestContext",
    "ContextBuilder",
    "GraphExecutor",
    "MutationPipeline",
    "AuthSuccess",
    "AuthFailure",
    "GitHubIdentityProvider",
    "RandomUserClient",
    # Messaging
    "PHOTO_ADDED",
    "NotificationBus",
    "Subscription",
    # Store
    "DocumentStore",
    "InMemoryDocumentStore",
    "SQLDocumentStore",
    "create_store",
]
