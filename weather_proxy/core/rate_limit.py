"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Fixed window per client key (see ``weather_proxy.core.client_key``).
- Quota exhaustion → 429; limiter failure → 503, never conflated.
"""

from __future__ import annotations

import logging

from fastapi import Request

from weather_proxy.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from weather_proxy.adapters.rate_limit.in_memory import InMemoryRateLimiter
from weather_proxy.core.client_key import hash_client_key, resolve_client_key
from weather_proxy.core.config import settings
from weather_proxy.core.errors import (
    RATE_LIMITER_UNAVAILABLE_MESSAGE,
    TOO_MANY_REQUESTS_MESSAGE,
    RateLimitAppError,
    RateLimiterUnavailableAppError,
)

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int, float] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_points,
        settings.app.rate_limit_duration_seconds,
        settings.app.rate_limit_max_keys,
        settings.app.rate_limit_sweep_interval_seconds,
    )

    if _limiter is None or _limiter_config != config:
        points, duration, max_keys, sweep_interval = config
        _limiter = InMemoryRateLimiter(
            points=points,
            duration=duration,
            max_keys=max_keys,
            sweep_interval_seconds=sweep_interval,
        )
        _limiter_config = config

    return _limiter


def reset_rate_limiter() -> None:
    """Forget the cached limiter so the next request builds a fresh one."""

    global _limiter, _limiter_config
    _limiter = None
    _limiter_config = None


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "Retry-After": str(result.retry_after_seconds or 0),
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at),
    }


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client rate limit.

    Consumes 1 point from the client's budget when rate limiting is enabled.

    Raises:
        RateLimitAppError: When the client exceeded its quota (429).
        RateLimiterUnavailableAppError: When the limiter itself failed (503).
    """

    if not settings.app.rate_limit_enabled:
        return

    key = resolve_client_key(request)
    key_hash = hash_client_key(key)

    try:
        limiter = get_rate_limiter()
        result = limiter.consume(key)
    except Exception as exc:
        logger.exception(
            "rate_limit.limiter_error",
            extra={"key_hash": key_hash, "error_type": type(exc).__name__},
        )
        raise RateLimiterUnavailableAppError(
            code="rate_limiter_unavailable",
            message=RATE_LIMITER_UNAVAILABLE_MESSAGE,
            details={"error_type": type(exc).__name__},
        ) from exc

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "window_s": settings.app.rate_limit_duration_seconds,
            "retry_after_s": retry_after,
        },
    )

    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message=TOO_MANY_REQUESTS_MESSAGE,
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": retry_after,
        },
        headers=_rate_limit_headers(result) if settings.app.rate_limit_include_headers else None,
    )
