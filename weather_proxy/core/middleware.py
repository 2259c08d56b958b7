"""HTTP middleware for request ID propagation and access logging.

The middleware:
- Accepts incoming X-Request-ID header or generates a UUID
- Stores request_id in contextvars for log correlation during the request
- Injects request_id and total duration into response headers, including on
  the fallback 500 for unhandled exceptions
- Emits one ``http.request`` log line per request
- Clears context after request completion to prevent context leaks

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from weather_proxy.core.config import settings
from weather_proxy.core.exception_handlers import general_exception_handler
from weather_proxy.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id to the request/response pair.

    If the client provides the configured request id header
    (``LOG_REQUEST_ID_HEADER``, default ``X-Request-ID``), that value is
    reused; otherwise a new UUID is generated.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response with ``X-Request-ID`` and ``X-Request-Duration-ms`` headers.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            # Answered here so the fallback 500 still carries the request id
            response = await general_exception_handler(request, exc)
        duration_ms = (time.perf_counter() - start) * 1000
        # Query string is left out: it carries user coordinates/city names
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
