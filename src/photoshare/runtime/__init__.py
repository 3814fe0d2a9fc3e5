"""
Runtime module - request context, execution and mutations.
"""

from __future__ import annotations

from .context import ContextBuilder, RequestContext
from .executor import GraphExecutor, ResultStream, format_error, format_result
from .identity import (
    AuthFailure,
    AuthResult,
    AuthSuccess,
    GitHubIdentityProvider,
    IdentityProvider,
    PeopleSource,
    RandomUserClient,
    person_to_user,
)
from .mutations import MutationPipeline

__all__ = [
    "RequestContext",
    "ContextBuilder",
    "GraphExecutor",
    "ResultStream",
    "format_error",
    "format_result",
    "AuthSuccess",
    "AuthFailure",
    "AuthResult",
    "IdentityProvider",
    "GitHubIdentityProvider",
    "PeopleSource",
    "RandomUserClient",
    "person_to_user",
    "MutationPipeline",
]
