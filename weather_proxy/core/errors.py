"""Application-level exception types.

This module defines domain errors raised by services, adapters and
dependencies. Each type maps to one HTTP status in the exception handlers,
and its ``message`` is the exact text returned to clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict

MISSING_PARAMETERS_MESSAGE = "Missing parameters"
TOO_MANY_REQUESTS_MESSAGE = "Too many requests. Please try again later."
UPSTREAM_FAILURE_MESSAGE = "Failed to fetch weather data"
RATE_LIMITER_UNAVAILABLE_MESSAGE = "Rate limiter unavailable. Please try again later."
INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorDetails(TypedDict, total=False):
    """Structured error context for logs. Never serialized to clients."""

    hint: str
    http_status: int
    endpoint: str
    error_type: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message returned to the client.
        details: Optional structured details for observability.
        headers: Optional response headers to attach when handled.
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input is missing or invalid."""


class RateLimitAppError(AppError):
    """Raised when a client exceeded its request quota."""


class RateLimiterUnavailableAppError(AppError):
    """Raised when the rate limiter itself failed to answer."""


class UpstreamAppError(AppError):
    """Raised when the weather provider call fails."""


class ConfigurationAppError(AppError):
    """Raised when server-side settings cannot be honored."""
