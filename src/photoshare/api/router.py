"""
FastAPI router for the PhotoShare API.

Endpoints:
- GET /         - Welcome text
- GET /health   - Liveness probe
- POST /graphql - Executes queries and mutations

Request body:
    {"query": "...", "variables": {...}, "operationName": "..."}

The ``Authorization`` header carries the user's token as-is.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from ..core.errors import StoreUnavailable, ValidationRejected

if TYPE_CHECKING:
    from ..gateway import Gateway

logger = logging.getLogger(__name__)


class GraphQLRequest(BaseModel):
    """GraphQL-over-HTTP request body."""
    query: str
    variables: Optional[dict[str, Any]] = None
    operation_name: Optional[str] = Field(default=None, alias="operationName")


def rejected_payload(error: ValidationRejected) -> dict[str, Any]:
    return {
        "errors": [
            {"message": message, "extensions": {"code": error.code}}
            for message in error.errors
        ]
    }


def store_error_payload(error: StoreUnavailable) -> dict[str, Any]:
    return {"errors": [{"message": str(error), "extensions": {"code": error.code}}]}


def get_gateway(request: Request) -> "Gateway":
    """Get the gateway owning this application."""
    return request.app.state.gateway


def create_graphql_router(graphql_path: str = "/graphql") -> APIRouter:
    """
    Create the HTTP router.

    Args:
        graphql_path: Path of the GraphQL endpoint

    Returns:
        Configured FastAPI router
    """
    router = APIRouter()

    @router.get("/", response_class=PlainTextResponse)
    async def welcome() -> str:
        return "Welcome to the PhotoShare API"

    @router.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @router.post(graphql_path)
    async def execute_request(
        body: GraphQLRequest,
        authorization: Optional[str] = Header(default=None),
        gateway: "Gateway" = Depends(get_gateway),
    ) -> Any:
        """Execute a query or mutation; shape violations never run."""
        try:
            context = await gateway.context_builder.build(authorization)
        except StoreUnavailable as e:
            logger.error(f"Could not build request context: {e}")
            return JSONResponse(status_code=503, content=store_error_payload(e))

        try:
            return await gateway.executor.execute(
                body.query,
                context,
                variables=body.variables,
                operation_name=body.operation_name,
            )
        except ValidationRejected as e:
            return JSONResponse(status_code=400, content=rejected_payload(e))

    return router
