"""
Graph executor - the query engine boundary.

Handles:
- Parsing and validating a query document (standard rules + shape guard)
- Executing queries and mutations against a RequestContext
- Opening subscription streams
- Formatting results, tagging errors with their ``extensions.code``
"""

from __future__ import annotations

import logging
from inspect import isawaitable
from typing import Any, AsyncIterator, Optional

from graphql import (
    DocumentNode,
    ExecutionResult,
    GraphQLError,
    GraphQLSchema,
    OperationType,
    get_operation_ast,
    parse,
    specified_rules,
    validate,
)
from graphql import execute as graphql_execute
from graphql import subscribe as graphql_subscribe

from ..core.errors import PhotoShareError, ValidationRejected
from ..core.guard import QueryShapeGuard
from .context import RequestContext

logger = logging.getLogger(__name__)


def format_error(error: GraphQLError) -> dict[str, Any]:
    """Serialize a GraphQL error, adding the code of known gateway errors."""
    formatted: dict[str, Any] = dict(error.formatted)
    original = error.original_error

    if isinstance(original, PhotoShareError):
        extensions = dict(formatted.get("extensions") or {})
        extensions["code"] = original.code
        formatted["extensions"] = extensions
    elif original is not None:
        logger.error(f"Unexpected resolver error at {error.path}: {original}", exc_info=original)

    return formatted


def format_result(result: ExecutionResult) -> dict[str, Any]:
    response: dict[str, Any] = {"data": result.data}
    if result.errors:
        response["errors"] = [format_error(error) for error in result.errors]
    return response


async def _single(payload: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
    yield payload


class ResultStream:
    """Formatted view over a graphql-core subscription iterator."""

    def __init__(self, results: Any):
        self._results = results

    def __aiter__(self) -> "ResultStream":
        return self

    async def __anext__(self) -> dict[str, Any]:
        return format_result(await self._results.__anext__())

    async def aclose(self) -> None:
        await self._results.aclose()


class GraphExecutor:
    """
    Runs GraphQL documents against the PhotoShare schema.

    Usage:
        executor = GraphExecutor(schema, guard)
        result = await executor.execute("{ totalPhotos }", context)
    """

    def __init__(self, schema: GraphQLSchema, guard: QueryShapeGuard):
        self.schema = schema
        self.guard = guard
        self.rules = [*specified_rules, *guard.validation_rules()]

    def prepare(self, query: str) -> DocumentNode:
        """
        Parse and statically validate a document.

        Raises:
            ValidationRejected: On syntax errors, schema violations or
                depth/cost limits; nothing is executed in that case
        """
        try:
            document = parse(query)
        except GraphQLError as e:
            raise ValidationRejected([e.message]) from e

        errors = validate(self.schema, document, self.rules)
        if errors:
            messages = [error.message for error in errors]
            logger.info(f"Query rejected: {messages}")
            raise ValidationRejected(messages)

        return document

    async def execute(
        self,
        query: str,
        context: RequestContext,
        variables: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Execute a query or mutation.

        Returns:
            {"data": ..., "errors": [...]} with field-level errors only
        """
        document = self.prepare(query)
        return await self._execute_document(document, context, variables, operation_name)

    async def _execute_document(
        self,
        document: DocumentNode,
        context: RequestContext,
        variables: Optional[dict[str, Any]],
        operation_name: Optional[str],
    ) -> dict[str, Any]:
        result = graphql_execute(
            self.schema,
            document,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
        if isawaitable(result):
            result = await result

        return format_result(result)

    async def subscribe(
        self,
        query: str,
        context: RequestContext,
        variables: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Open a subscription stream of formatted results.

        Closing the returned iterator closes the underlying bus subscription.
        Queries and mutations yield exactly one result.
        """
        document = self.prepare(query)

        operation = get_operation_ast(document, operation_name)
        if operation is None or operation.operation != OperationType.SUBSCRIPTION:
            return _single(
                await self._execute_document(document, context, variables, operation_name)
            )

        result = graphql_subscribe(
            self.schema,
            document,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
        if isawaitable(result):
            result = await result

        if isinstance(result, ExecutionResult):
            return _single(format_result(result))
        return ResultStream(result)
