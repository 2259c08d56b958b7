"""Tests for client key derivation."""

from __future__ import annotations

from starlette.requests import Request

from weather_proxy.core.client_key import UNKNOWN_CLIENT_KEY, hash_client_key, resolve_client_key


def _request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = ("10.1.1.1", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/weather",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_uses_first_forwarded_address() -> None:
    request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1, 10.0.0.2"})

    assert resolve_client_key(request) == "203.0.113.7"


def test_falls_back_to_peer_address() -> None:
    assert resolve_client_key(_request()) == "10.1.1.1"


def test_blank_forwarded_header_falls_back_to_peer_address() -> None:
    request = _request({"X-Forwarded-For": " , 10.0.0.1"})

    assert resolve_client_key(request) == "10.1.1.1"


def test_unknown_when_no_address_available() -> None:
    assert resolve_client_key(_request(client=None)) == UNKNOWN_CLIENT_KEY


def test_forwarded_header_ignored_when_untrusted() -> None:
    request = _request({"X-Forwarded-For": "203.0.113.7"})

    assert resolve_client_key(request, trust_forwarded_for=False) == "10.1.1.1"


def test_hash_is_stable_and_does_not_expose_address() -> None:
    hashed = hash_client_key("203.0.113.7")

    assert hashed == hash_client_key("203.0.113.7")
    assert hashed != hash_client_key("203.0.113.8")
    assert "203.0.113.7" not in hashed
    assert len(hashed) == 16
