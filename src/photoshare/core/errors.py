"""
Custom exceptions for the PhotoShare gateway.

Every error carries a stable ``code`` that is exposed to clients in
GraphQL ``extensions.code``.
"""

from __future__ import annotations

from typing import Optional


class PhotoShareError(Exception):
    """Base exception for all gateway errors."""

    code = "INTERNAL_ERROR"


class Unauthorized(PhotoShareError):
    """Raised when a mutation is attempted without a resolved current user."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFound(PhotoShareError):
    """Raised when a lookup target does not exist."""

    code = "NOT_FOUND"


class ExternalAuthFailure(PhotoShareError):
    """Raised when the identity provider returns an error instead of a token."""

    code = "EXTERNAL_AUTH_FAILURE"

    def __init__(self, message: str):
        self.provider_message = message
        super().__init__(message)


class ValidationRejected(PhotoShareError):
    """Raised when a query document is rejected before execution."""

    code = "VALIDATION_REJECTED"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {errors}")


class StoreUnavailable(PhotoShareError):
    """Raised when an underlying document store operation fails."""

    code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Store operation '{operation}' failed: {message}")


class ServiceError(PhotoShareError):
    """Raised when an upstream HTTP service call fails."""

    code = "SERVICE_ERROR"

    def __init__(self, service: str, status_code: Optional[int], message: str):
        self.service = service
        self.status_code = status_code
        status = f" returned {status_code}" if status_code is not None else " failed"
        super().__init__(f"Service '{service}'{status}: {message}")
