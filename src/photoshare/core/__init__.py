"""
Core module - schema, scalars, query shape guard and errors.
"""

from __future__ import annotations

from .errors import (
    ExternalAuthFailure,
    NotFound,
    PhotoShareError,
    ServiceError,
    StoreUnavailable,
    Unauthorized,
    ValidationRejected,
)
from .guard import (
    CostLimitRule,
    DepthLimitRule,
    QueryShape,
    QueryShapeGuard,
    collect_fragments,
)
from .scalars import DateTimeScalar, format_instant, to_instant
from .schema import TYPE_DEFS, build_photoshare_schema

__all__ = [
    # Errors
    "PhotoShareError",
    "Unauthorized",
    "NotFound",
    "ExternalAuthFailure",
    "ValidationRejected",
    "StoreUnavailable",
    "ServiceError",
    # Guard
    "QueryShape",
    "QueryShapeGuard",
    "DepthLimitRule",
    "CostLimitRule",
    "collect_fragments",
    # Scalars
    "DateTimeScalar",
    "to_instant",
    "format_instant",
    # Schema
    "TYPE_DEFS",
    "build_photoshare_schema",
]
