"""
Query shape guard - static depth and cost limits.

Both checks walk the parsed document before any resolver runs and plug into
graphql-core validation as extra rules, so a violation rejects the whole
request.

Depth: root fields sit at depth 0 and every nested selection set adds one.
Fragments are expanded in place and introspection fields are ignored.

Cost: every field costs its weight plus the cost of its sub-selection; a
list-returning field multiplies that by ``list_factor``. Weights default to
``scalar_cost`` for leaf fields and ``object_cost`` for object fields and
can be overridden per ``"Type.field"``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLError,
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    InlineFragmentNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    ValidationRule,
    get_named_type,
    get_nullable_type,
    is_leaf_type,
    is_list_type,
)

from .errors import ValidationRejected

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5
DEFAULT_MAX_COST = 1000
DEFAULT_LIST_FACTOR = 10

Fragments = dict[str, FragmentDefinitionNode]


@dataclass
class QueryShape:
    """Measured shape of a document (worst operation)."""
    depth: int
    cost: int


def collect_fragments(document: DocumentNode) -> Fragments:
    return {
        definition.name.value: definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }


def _operation_name(operation: OperationDefinitionNode) -> str:
    return operation.name.value if operation.name else "anonymous"


class QueryShapeGuard:
    """
    Static analysis of query depth and estimated cost.

    Usage:
        guard = QueryShapeGuard(schema, max_depth=5, max_cost=1000)
        errors = validate(schema, document, [*specified_rules, *guard.validation_rules()])

        shape = guard.measure(document)
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_cost: int = DEFAULT_MAX_COST,
        scalar_cost: int = 1,
        object_cost: int = 0,
        list_factor: int = DEFAULT_LIST_FACTOR,
        field_weights: Optional[dict[str, int]] = None,
    ):
        self.schema = schema
        self.max_depth = max_depth
        self.max_cost = max_cost
        self.scalar_cost = scalar_cost
        self.object_cost = object_cost
        self.list_factor = list_factor
        self.field_weights = dict(field_weights or {})

    # --- Depth ---

    def operation_depth(
        self, operation: OperationDefinitionNode, fragments: Fragments
    ) -> int:
        depth = self._selection_depth(operation.selection_set, fragments, {}, frozenset())
        return depth or 0

    def _selection_depth(
        self,
        selection_set: SelectionSetNode,
        fragments: Fragments,
        cache: dict[str, Optional[int]],
        active: frozenset[str],
    ) -> Optional[int]:
        """
        Deepest counted field below ``selection_set``, relative to it.

        Returns None when the set holds no counted fields. A fragment's
        relative depth does not depend on where it is spread, so each one
        is walked once per operation.
        """
        deepest: Optional[int] = None

        def deeper(depth: Optional[int]) -> None:
            nonlocal deepest
            if depth is not None and (deepest is None or depth > deepest):
                deepest = depth

        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                if selection.name.value.startswith("__"):
                    continue
                deeper(0)
                if selection.selection_set:
                    child = self._selection_depth(
                        selection.selection_set, fragments, cache, active
                    )
                    if child is not None:
                        deeper(child + 1)

            elif isinstance(selection, InlineFragmentNode):
                deeper(self._selection_depth(selection.selection_set, fragments, cache, active))

            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                if name not in cache:
                    fragment = fragments.get(name)
                    # Unknown or cyclic spreads are reported by the standard rules
                    if fragment is None or name in active:
                        continue
                    cache[name] = self._selection_depth(
                        fragment.selection_set, fragments, cache, active | {name}
                    )
                deeper(cache[name])
        return deepest

    # --- Cost ---

    def _root_type(self, operation: OperationDefinitionNode) -> Optional[GraphQLObjectType]:
        if operation.operation == OperationType.MUTATION:
            return self.schema.mutation_type
        if operation.operation == OperationType.SUBSCRIPTION:
            return self.schema.subscription_type
        return self.schema.query_type

    def operation_cost(
        self, operation: OperationDefinitionNode, fragments: Fragments
    ) -> int:
        """
        Estimated cost of one operation.

        The walk stops as soon as a selection set runs over ``max_cost``, so
        a cost above the limit is a lower bound rather than the full total.
        """
        root_type = self._root_type(operation)
        if root_type is None:
            return 0
        return self._selection_cost(
            operation.selection_set, root_type, fragments, {}, frozenset()
        )

    def _selection_cost(
        self,
        selection_set: SelectionSetNode,
        parent_type: GraphQLNamedType,
        fragments: Fragments,
        cache: dict[str, int],
        active: frozenset[str],
    ) -> int:
        total = 0
        for selection in selection_set.selections:
            if total > self.max_cost:
                break

            if isinstance(selection, FieldNode):
                name = selection.name.value
                if name.startswith("__"):
                    continue
                if not isinstance(parent_type, (GraphQLObjectType, GraphQLInterfaceType)):
                    continue
                field_def = parent_type.fields.get(name)
                if field_def is None:
                    continue
                total += self._field_cost(
                    parent_type, name, field_def, selection, fragments, cache, active
                )

            elif isinstance(selection, InlineFragmentNode):
                fragment_type = parent_type
                if selection.type_condition:
                    fragment_type = self.schema.get_type(selection.type_condition.name.value)
                if fragment_type is not None:
                    total += self._selection_cost(
                        selection.selection_set, fragment_type, fragments, cache, active
                    )

            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                if name not in cache:
                    fragment = fragments.get(name)
                    if fragment is None or name in active:
                        continue
                    # A fragment's cost depends only on its type condition
                    fragment_type = self.schema.get_type(fragment.type_condition.name.value)
                    if fragment_type is None:
                        continue
                    cache[name] = self._selection_cost(
                        fragment.selection_set, fragment_type, fragments, cache, active | {name}
                    )
                total += cache[name]
        return total

    def _field_cost(
        self,
        parent_type: GraphQLNamedType,
        name: str,
        field_def: GraphQLField,
        node: FieldNode,
        fragments: Fragments,
        cache: dict[str, int],
        active: frozenset[str],
    ) -> int:
        named_type = get_named_type(field_def.type)
        weight = self.field_weights.get(f"{parent_type.name}.{name}")
        if weight is None:
            weight = self.scalar_cost if is_leaf_type(named_type) else self.object_cost

        cost = weight
        if node.selection_set:
            cost += self._selection_cost(node.selection_set, named_type, fragments, cache, active)

        if is_list_type(get_nullable_type(field_def.type)):
            cost *= self.list_factor
        return cost

    # --- Public API ---

    def measure(self, document: DocumentNode) -> QueryShape:
        """Return the worst depth and cost across the document's operations."""
        fragments = collect_fragments(document)
        depth = cost = 0
        for definition in document.definitions:
            if isinstance(definition, OperationDefinitionNode):
                depth = max(depth, self.operation_depth(definition, fragments))
                cost = max(cost, self.operation_cost(definition, fragments))
        return QueryShape(depth=depth, cost=cost)

    def cost_message(self, cost: int) -> str:
        return f"The query exceeds the maximum cost of {self.max_cost}. Actual cost is {cost}"

    def validation_rules(self) -> list[type[ValidationRule]]:
        """Rule classes bound to this guard, for graphql-core ``validate``."""
        attrs = {"guard": self}
        return [
            type("BoundDepthLimitRule", (DepthLimitRule,), attrs),
            type("BoundCostLimitRule", (CostLimitRule,), attrs),
        ]


class DepthLimitRule(ValidationRule):
    """Reports operations nested deeper than the guard allows."""

    guard: QueryShapeGuard

    def enter_operation_definition(
        self, node: OperationDefinitionNode, *_args: Any
    ) -> None:
        fragments = collect_fragments(self.context.document)
        depth = self.guard.operation_depth(node, fragments)
        if depth > self.guard.max_depth:
            self.report_error(
                GraphQLError(
                    f"'{_operation_name(node)}' exceeds maximum operation depth "
                    f"of {self.guard.max_depth}",
                    node,
                    extensions={"code": ValidationRejected.code, "depth": depth},
                )
            )


class CostLimitRule(ValidationRule):
    """Logs each operation's estimated cost and reports it when over budget."""

    guard: QueryShapeGuard

    def enter_operation_definition(
        self, node: OperationDefinitionNode, *_args: Any
    ) -> None:
        fragments = collect_fragments(self.context.document)
        cost = self.guard.operation_cost(node, fragments)
        logger.info(f"Query cost: {cost}")
        if cost > self.guard.max_cost:
            self.report_error(
                GraphQLError(
                    self.guard.cost_message(cost),
                    node,
                    extensions={"code": ValidationRejected.code, "cost": cost},
                )
            )
