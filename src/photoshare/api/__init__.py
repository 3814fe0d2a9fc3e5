"""
API module - HTTP endpoints for the PhotoShare gateway.
"""

from __future__ import annotations

from .router import GraphQLRequest, create_graphql_router, get_gateway, rejected_payload

__all__ = [
    "GraphQLRequest",
    "create_graphql_router",
    "get_gateway",
    "rejected_payload",
]
