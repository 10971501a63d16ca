"""Tests for log redaction and JSON formatting."""

from __future__ import annotations

import json
import logging
from io import StringIO
from logging.handlers import RotatingFileHandler

import pytest

from app.core.config import LogSettings
from app.core.logging import (
    JsonFormatter,
    _build_handler,
    get_request_id,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def capture():
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def test_redacts_api_keys(capture):
    logger, stream = capture
    logger.info(
        "auth.failed",
        extra={"api_key": "sk-secret-123", "x-api-key": "another-secret", "safe_field": "visible"},
    )

    output = stream.getvalue()
    assert "sk-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_redacts_recipient_addresses(capture):
    logger, stream = capture
    logger.info(
        "recipient_throttle.limited",
        extra={"to_email": "vendor@example.com", "organization_id": "org-1", "count": 5},
    )

    payload = json.loads(stream.getvalue())
    assert payload["to_email"] == "[REDACTED]"
    assert payload["organization_id"] == "org-1"
    assert payload["count"] == 5


def test_redacts_nested_dicts(capture):
    logger, stream = capture
    logger.info(
        "nested_event",
        extra={"headers": {"x-api-key": "secret-key", "user-agent": "pytest"}},
    )

    output = stream.getvalue()
    assert "secret-key" not in output
    assert "pytest" in output


def test_safe_fields_pass_through(capture):
    logger, stream = capture
    logger.warning(
        "rate_limit.exceeded",
        extra={"key_type": "org", "key_hash": "abcd1234", "limit": 10, "retry_after_ms": 59970},
    )

    payload = json.loads(stream.getvalue())
    assert payload["message"] == "rate_limit.exceeded"
    assert payload["level"] == "warning"
    assert payload["retry_after_ms"] == 59970
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_from_context(capture):
    logger, stream = capture
    set_request_id("req-777")
    logger.info("with_context")

    assert json.loads(stream.getvalue())["request_id"] == "req-777"


def test_request_id_context_roundtrip():
    set_request_id("req-1")
    assert get_request_id() == "req-1"

    clear_request_id()
    assert get_request_id() is None


def test_build_handler_file_output(tmp_path):
    rotating = _build_handler(
        LogSettings(output="file", file_path=str(tmp_path / "logs" / "app.log"), max_bytes=1024)
    )
    plain = _build_handler(
        LogSettings(output="file", file_path=str(tmp_path / "plain.log"), max_bytes=0)
    )
    try:
        assert isinstance(rotating, RotatingFileHandler)
        assert (tmp_path / "logs").is_dir()
        assert isinstance(plain, logging.FileHandler)
        assert not isinstance(plain, RotatingFileHandler)
    finally:
        rotating.close()
        plain.close()


def test_build_handler_defaults_to_stdout():
    handler = _build_handler(LogSettings(output="stdout"))
    assert isinstance(handler, logging.StreamHandler)
    assert not isinstance(handler, logging.FileHandler)
