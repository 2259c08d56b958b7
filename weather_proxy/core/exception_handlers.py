"""Global exception handlers for consistent error responses.

Every error reaching the client has the shape ``{"error": "<message>"}``.

Design:
- AppError subclasses → fixed HTTP status per error type (400, 429, 500, 503)
- Unknown AppError subclasses → 500, never blamed on the client
- Unexpected Exception → generic 500 (safety net)
- Correlation ids travel in the X-Request-ID response header, not the body
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from weather_proxy.core.errors import (
    INTERNAL_ERROR_MESSAGE,
    AppError,
    RateLimitAppError,
    RateLimiterUnavailableAppError,
    ValidationAppError,
)
from weather_proxy.core.logging import get_request_id

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, ValidationAppError):
        return 400
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, RateLimiterUnavailableAppError):
        return 503
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate domain errors into their fixed JSON/status pairs.

    - ValidationAppError → 400 Bad Request
    - RateLimitAppError → 429 Too Many Requests (+ rate limit headers)
    - UpstreamAppError → 500 Internal Server Error
    - ConfigurationAppError → 500 Internal Server Error
    - RateLimiterUnavailableAppError → 503 Service Unavailable

    Details are logged for observability but never returned to the client.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error message and mapped status code.
    """
    status_code = status_code_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "error_details": exc.details or {},
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure with its type and message while returning a generic
    body, so no stack traces or internal messages leak to the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
