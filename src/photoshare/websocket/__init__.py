"""
WebSocket module for real-time subscriptions.

Provides:
- WebSocketRouter: graphql-ws protocol handling over the executor
"""

from __future__ import annotations

from .router import GRAPHQL_WS, ConnectionState, WebSocketRouter, create_websocket_router

__all__ = [
    "GRAPHQL_WS",
    "ConnectionState",
    "WebSocketRouter",
    "create_websocket_router",
]
