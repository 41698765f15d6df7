"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    release: str
    url: str
    path: str
    http_status: int
    max_bytes: int
    actual_bytes: int
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


class NotFoundAppError(AppError):
    """Raised when a requested resource (e.g. a release) is unknown."""


class UpstreamAppError(AppError):
    """Raised when the upstream source hosting API cannot be used."""


class ReferenceCacheError(AppError):
    """Raised when the cached reference table cannot be loaded."""


class PayloadTooLargeAppError(AppError):
    """Raised when a submitted lockfile exceeds the configured size limit."""
