"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from weather_proxy.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_provider_key():
    logger, stream = _capture("test_redaction")

    logger.info(
        "upstream_call",
        extra={
            "appid": "owm-secret-123",
            "api_key": "another-secret",
            "endpoint": "/weather",
        },
    )

    output = stream.getvalue()

    assert "owm-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "/weather" in output


def test_sensitive_filter_redacts_client_addresses():
    logger, stream = _capture("test_address_redaction")

    logger.info(
        "client_event",
        extra={
            "client_ip": "203.0.113.7",
            "headers": {"X-Forwarded-For": "198.51.100.23", "user-agent": "pytest"},
            "key_hash": "abcd1234abcd1234",
        },
    )

    output = stream.getvalue()

    assert "203.0.113.7" not in output
    assert "198.51.100.23" not in output
    assert "pytest" in output
    assert "abcd1234abcd1234" in output


def test_sensitive_filter_allows_safe_fields():
    logger, stream = _capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "route": "/api/weather",
            "status_code": 200,
            "duration_ms": 150.5,
        },
    )

    record = json.loads(stream.getvalue())

    assert record["message"] == "safe_event"
    assert record["route"] == "/api/weather"
    assert record["status_code"] == 200
    assert "[REDACTED]" not in stream.getvalue()


def test_formatter_includes_request_id_from_context():
    logger, stream = _capture("test_request_id")

    set_request_id("req-789")
    try:
        logger.info("correlated_event")
    finally:
        clear_request_id()

    record = json.loads(stream.getvalue())
    assert record["request_id"] == "req-789"
