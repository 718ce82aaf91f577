"""Tests for sensitive data filtering and request correlation in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from storefront.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    redact,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_credentials():
    """Ensure passwords and tokens never reach the sink."""
    logger, stream = _capture("test_redaction")

    logger.info(
        "login_event",
        extra={
            "password": "hunter2",
            "token": "eyJhbGciOi.secret",
            "authorization": "Bearer abc.def",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "hunter2" not in output
    assert "eyJhbGciOi.secret" not in output
    assert "Bearer abc.def" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_allows_safe_fields():
    """Verify safe fields pass through unmodified."""
    logger, stream = _capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "route": "/api/users/login",
            "status_code": 401,
            "attempts_left": 3,
        },
    )

    payload = json.loads(stream.getvalue())

    assert payload["route"] == "/api/users/login"
    assert payload["status_code"] == 401
    assert payload["attempts_left"] == 3
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""
    logger, stream = _capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {"Authorization": "Bearer secret-token", "user-agent": "pytest"},
            "body": [{"email": "a@b.c", "password": "pw-123"}],
        },
    )

    output = stream.getvalue()

    assert "secret-token" not in output
    assert "pw-123" not in output
    assert "pytest" in output
    assert "a@b.c" in output


def test_request_id_is_attached_from_context():
    logger, stream = _capture("test_request_id")
    set_request_id("req-123")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-123"


def test_redact_keeps_sequence_types():
    value = {"items": ("a", {"token": "t"}), "count": 2}

    result = redact(value)

    assert result == {"items": ("a", {"token": "[REDACTED]"}), "count": 2}


def test_hash_identifier_is_stable_and_short():
    first = hash_identifier("10.0.0.1")

    assert first == hash_identifier("10.0.0.1")
    assert first != hash_identifier("10.0.0.2")
    assert len(first) == 16
    assert "10.0.0.1" not in first
