"""Application-level exception types.

This module defines domain errors used across services/adapters and the
client library, enabling consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    field: str
    attempts_left: int
    http_status: int
    retry_after: int
    resource: str
    resource_id: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class ConflictAppError(AppError):
    """Raised when a resource already exists (e.g. duplicate email)."""


class AuthenticationAppError(AppError):
    """Raised when credentials or bearer tokens are missing or invalid."""


class PermissionAppError(AppError):
    """Raised when an authenticated user may not perform the operation."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class ThrottledAppError(AppError):
    """Raised when a client is locked out or over its request budget."""


class RequestAppError(AppError):
    """Raised by the storefront client when a remote operation fails.

    ``message`` is already normalized for display to the end user.
    """
