"""
DateTime scalar.

Internally instants are timezone-aware UTC ``datetime`` objects; on the wire
they are ISO-8601 strings with millisecond precision and a ``Z`` suffix,
e.g. ``2024-05-01T12:30:00.000Z``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from graphql import GraphQLError, GraphQLScalarType, IntValueNode, StringValueNode, ValueNode


def to_instant(value: Any) -> datetime:
    """
    Coerce a raw value into an aware UTC datetime.

    Accepts datetime objects, ISO-8601 strings and epoch milliseconds.
    Naive datetimes are taken to be UTC.
    """
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, bool):
        raise ValueError(f"Cannot interpret {value!r} as a date time")
    elif isinstance(value, (int, float)):
        instant = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        instant = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Cannot interpret {value!r} as a date time")

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def format_instant(instant: datetime) -> str:
    instant = to_instant(instant)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def serialize_datetime(value: Any) -> str:
    try:
        return format_instant(to_instant(value))
    except (TypeError, ValueError, OverflowError) as e:
        raise GraphQLError(f"DateTime cannot represent value: {value!r}") from e


def parse_datetime_value(value: Any) -> datetime:
    try:
        return to_instant(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise GraphQLError(f"DateTime cannot represent value: {value!r}") from e


def parse_datetime_literal(
    value_node: ValueNode, _variables: Optional[dict[str, Any]] = None
) -> datetime:
    if isinstance(value_node, StringValueNode):
        return parse_datetime_value(value_node.value)
    if isinstance(value_node, IntValueNode):
        return parse_datetime_value(int(value_node.value))
    raise GraphQLError("DateTime literals must be strings or integers", value_node)


DateTimeScalar = GraphQLScalarType(
    name="DateTime",
    description="A valid date time value",
    serialize=serialize_datetime,
    parse_value=parse_datetime_value,
    parse_literal=parse_datetime_literal,
)
