"""Tests for structlog configuration helpers."""

from __future__ import annotations

import structlog

from gateway_service_libs.logging_utils import (
    add_service_context,
    bind_request_context,
    clear_request_context,
    configure_service_logging,
    create_service_logger,
)


def test_add_service_context_uses_environment(monkeypatch) -> None:
    monkeypatch.setenv("SERVICE_NAME", "session-gateway-service")
    monkeypatch.setenv("ENVIRONMENT", "testing")

    event = add_service_context(None, "info", {"event": "hello"})

    assert event["service.name"] == "session-gateway-service"
    assert event["deployment.environment"] == "testing"


def test_request_context_binding_and_clearing() -> None:
    bind_request_context("abc-123", path="/v1/files")
    assert structlog.contextvars.get_contextvars() == {
        "correlation_id": "abc-123",
        "path": "/v1/files",
    }

    bind_request_context("def-456")
    assert structlog.contextvars.get_contextvars() == {"correlation_id": "def-456"}

    clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_configure_and_log_to_rotating_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    log_file = tmp_path / "logs" / "gateway.log"

    configure_service_logging(
        "session-gateway-service",
        environment="testing",
        log_to_file=True,
        log_file_path=str(log_file),
    )
    logger = create_service_logger("test")
    logger.info("file logging works", answer=42)

    contents = log_file.read_text(encoding="utf-8")
    assert "file logging works" in contents
    assert '"logger_name": "test"' in contents
