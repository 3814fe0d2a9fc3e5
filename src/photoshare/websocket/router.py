"""
WebSocket router for PhotoShare subscriptions.

Speaks the ``graphql-ws`` subprotocol (subscriptions-transport-ws).

Client -> server:
    {"type": "connection_init", "payload": {"Authorization": "<token>"}}
    {"type": "start", "id": "1", "payload": {"query": "subscription { newPhoto { name } }"}}
    {"type": "stop", "id": "1"}
    {"type": "connection_terminate"}

Server -> client:
    connection_ack, connection_error, data, error, complete
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from fastapi import WebSocket, WebSocketDisconnect

from ..core.errors import PhotoShareError, StoreUnavailable, ValidationRejected
from ..runtime.context import ContextBuilder, RequestContext
from ..runtime.executor import GraphExecutor

logger = logging.getLogger(__name__)

GRAPHQL_WS = "graphql-ws"

GQL_CONNECTION_INIT = "connection_init"
GQL_CONNECTION_ACK = "connection_ack"
GQL_CONNECTION_ERROR = "connection_error"
GQL_CONNECTION_TERMINATE = "connection_terminate"
GQL_START = "start"
GQL_STOP = "stop"
GQL_DATA = "data"
GQL_ERROR = "error"
GQL_COMPLETE = "complete"


@dataclass
class RunningOperation:
    """A started operation and the stream it is pumping."""
    task: asyncio.Task
    stream: AsyncIterator[dict[str, Any]]


class ConnectionState:
    """Per-connection context and running operations."""

    def __init__(self, websocket: WebSocket):
        self.connection_id = str(uuid.uuid4())
        self.websocket = websocket
        self.context: Optional[RequestContext] = None
        self.operations: dict[str, RunningOperation] = {}

    async def send(self, message: dict[str, Any]) -> None:
        await self.websocket.send_json(message)


class WebSocketRouter:
    """
    Runs subscriptions over WebSocket connections.

    Each ``start`` message opens a stream through the executor and pumps its
    results to the client until the stream ends, the client sends ``stop``
    or the connection drops. Dropping a stream cancels its bus subscription.
    """

    def __init__(self, context_builder: ContextBuilder, executor: GraphExecutor):
        self.context_builder = context_builder
        self.executor = executor

    async def handle_connection(self, websocket: WebSocket) -> None:
        """
        Handle a WebSocket connection from a client.

        Flow:
        1. Accept with the graphql-ws subprotocol
        2. Build the request context on connection_init
        3. Start and stop operations as requested
        4. Cancel every running operation on disconnect
        """
        await websocket.accept(subprotocol=GRAPHQL_WS)
        state = ConnectionState(websocket)
        logger.info(f"Client {state.connection_id} connected")

        terminated = False
        try:
            while not terminated:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning(f"Invalid JSON from client {state.connection_id}")
                    await state.send(
                        {"type": GQL_ERROR, "payload": {"message": "Message must be valid JSON"}}
                    )
                    continue
                terminated = not await self._handle_message(state, message)
        except WebSocketDisconnect:
            logger.info(f"Client {state.connection_id} disconnected")
        finally:
            await self._stop_all(state)

        if terminated:
            await websocket.close()

    async def _handle_message(self, state: ConnectionState, message: Any) -> bool:
        """
        Handle one client message.

        Returns:
            False when the connection should be closed
        """
        if not isinstance(message, dict):
            await state.send({"type": GQL_ERROR, "payload": {"message": "Message must be an object"}})
            return True

        message_type = message.get("type")

        if message_type == GQL_CONNECTION_INIT:
            await self._handle_init(state, message.get("payload"))

        elif message_type == GQL_START:
            await self._handle_start(state, message.get("id"), message.get("payload") or {})

        elif message_type == GQL_STOP:
            await self._handle_stop(state, message.get("id"))

        elif message_type == GQL_CONNECTION_TERMINATE:
            return False

        else:
            logger.warning(f"Unknown message type: {message_type}")
            await state.send({
                "type": GQL_ERROR,
                "id": message.get("id"),
                "payload": {"message": f"Unknown message type: {message_type}"},
            })

        return True

    async def _handle_init(self, state: ConnectionState, payload: Any) -> None:
        params = payload if isinstance(payload, dict) else None
        try:
            state.context = await self.context_builder.build_for_connection(params)
        except StoreUnavailable as e:
            logger.error(f"Could not build connection context: {e}")
            await state.send({"type": GQL_CONNECTION_ERROR, "payload": {"message": str(e)}})
            return

        await state.send({"type": GQL_CONNECTION_ACK})

    async def _handle_start(self, state: ConnectionState, op_id: Any, payload: dict) -> None:
        """
        Handle start request.

        Message format:
        {
            "type": "start",
            "id": "1",
            "payload": {
                "query": "subscription { newPhoto { name } }",
                "variables": {},
                "operationName": null
            }
        }
        """
        if op_id is None:
            await state.send({"type": GQL_ERROR, "payload": {"message": "Operation id is required"}})
            return

        op_id = str(op_id)
        # Restarting an id replaces the previous operation
        await self._handle_stop(state, op_id)

        if state.context is None:
            state.context = await self.context_builder.build(None)

        try:
            stream = await self.executor.subscribe(
                payload.get("query") or "",
                state.context,
                variables=payload.get("variables"),
                operation_name=payload.get("operationName"),
            )
        except ValidationRejected as e:
            await state.send({
                "type": GQL_ERROR,
                "id": op_id,
                "payload": [
                    {"message": message, "extensions": {"code": e.code}}
                    for message in e.errors
                ],
            })
            return

        task = asyncio.create_task(self._pump(state, op_id, stream))
        state.operations[op_id] = RunningOperation(task=task, stream=stream)

    async def _pump(
        self, state: ConnectionState, op_id: str, stream: AsyncIterator[dict[str, Any]]
    ) -> None:
        """Forward stream results to the client until the stream ends."""
        try:
            async for result in stream:
                await state.send({"type": GQL_DATA, "id": op_id, "payload": result})
            await state.send({"type": GQL_COMPLETE, "id": op_id})
        except PhotoShareError as e:
            await state.send({
                "type": GQL_ERROR,
                "id": op_id,
                "payload": [{"message": str(e), "extensions": {"code": e.code}}],
            })
        except WebSocketDisconnect:
            logger.debug(f"Client {state.connection_id} went away during {op_id}")
        finally:
            await stream.aclose()
            running = state.operations.get(op_id)
            if running is not None and running.task is asyncio.current_task():
                del state.operations[op_id]

    async def _handle_stop(self, state: ConnectionState, op_id: Any) -> None:
        running = state.operations.pop(str(op_id), None)
        if running is None:
            return
        await self._cancel(running)

    async def _stop_all(self, state: ConnectionState) -> None:
        running = list(state.operations.values())
        state.operations.clear()
        for operation in running:
            await self._cancel(operation)
        if running:
            logger.info(f"Stopped {len(running)} operation(s) for {state.connection_id}")

    @staticmethod
    async def _cancel(running: RunningOperation) -> None:
        running.task.cancel()
        await asyncio.gather(running.task, return_exceptions=True)
        # A task cancelled before it first ran never reaches its cleanup
        await running.stream.aclose()


def create_websocket_router(
    context_builder: ContextBuilder, executor: GraphExecutor
) -> WebSocketRouter:
    """
    Factory for creating the WebSocket router.

    Args:
        context_builder: Builds the connection's RequestContext
        executor: Runs subscription documents

    Returns:
        Configured WebSocket router
    """
    return WebSocketRouter(context_builder, executor)
