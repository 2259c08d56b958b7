"""Client key derivation for per-client rate limiting.

The key is the first address in ``X-Forwarded-For`` (the originating client
when running behind a proxy or platform load balancer), then the peer address
of the connection, then the ``"unknown"`` sentinel.

Clients sharing a NAT or proxy share a key; this is an accepted limitation.
"""

from __future__ import annotations

import hashlib

from fastapi import Request

from weather_proxy.core.config import settings

UNKNOWN_CLIENT_KEY = "unknown"
FORWARDED_FOR_HEADER = "X-Forwarded-For"


def _first_forwarded_address(header_value: str | None) -> str | None:
    """Return the left-most address of an X-Forwarded-For value.

    Examples:
        >>> _first_forwarded_address("203.0.113.7, 10.0.0.1")
        '203.0.113.7'
        >>> _first_forwarded_address(" , 10.0.0.1") is None
        True
    """
    if not header_value:
        return None
    first = header_value.split(",")[0].strip()
    return first or None


def resolve_client_key(request: Request, *, trust_forwarded_for: bool | None = None) -> str:
    """Derive the rate limit key for a request.

    Args:
        request: Incoming request.
        trust_forwarded_for: Override for ``APP_TRUST_FORWARDED_FOR``.

    Returns:
        Client address string, or ``"unknown"`` when none is available.
    """
    if trust_forwarded_for is None:
        trust_forwarded_for = settings.app.trust_forwarded_for

    if trust_forwarded_for:
        forwarded = _first_forwarded_address(request.headers.get(FORWARDED_FOR_HEADER))
        if forwarded:
            return forwarded

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT_KEY


def hash_client_key(key: str) -> str:
    """Hash a client key for logging without exposing client addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]
