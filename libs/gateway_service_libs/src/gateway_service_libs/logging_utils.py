"""
structlog setup shared by gateway services.

Every log line carries the service name, deployment environment and, while a
request is in flight, its correlation ID. Output is JSON when ``LOG_FORMAT=json``
or in production, and coloured console output otherwise. ``LOG_TO_FILE``
additionally writes to a size-rotated file.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.typing import Processor

TRUTHY = ("true", "1", "yes")
DEFAULT_LOG_DIR = "/app/logs"
DEFAULT_MAX_BYTES = 100 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 10


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp ``service.name`` and ``deployment.environment`` on each event."""
    event_dict["service.name"] = os.getenv("SERVICE_NAME", "unknown")
    event_dict["deployment.environment"] = os.getenv("ENVIRONMENT", "development")
    return event_dict


def _wants_json(environment: str) -> bool:
    log_format = os.getenv("LOG_FORMAT", "").lower()
    if log_format:
        return log_format == "json"
    return environment == "production"


def _gateway_processors(use_json: bool) -> list[Processor]:
    chain: list[Processor] = [
        merge_contextvars,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]
    if use_json:
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        chain += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True)]
    return chain


def _rotating_file_handler(service_name: str, log_file_path: str | None) -> logging.Handler:
    path = Path(
        log_file_path or os.getenv("LOG_FILE_PATH", f"{DEFAULT_LOG_DIR}/{service_name}.log")
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.getenv("LOG_MAX_BYTES", str(DEFAULT_MAX_BYTES))),
        backupCount=int(os.getenv("LOG_BACKUP_COUNT", str(DEFAULT_BACKUP_COUNT))),
        encoding="utf-8",
    )


def configure_service_logging(
    service_name: str,
    environment: str | None = None,
    log_level: str = "INFO",
    log_to_file: bool | None = None,
    log_file_path: str | None = None,
) -> None:
    """
    Route stdlib logging and structlog through one processor chain.

    Args:
        service_name: Value for ``service.name`` unless SERVICE_NAME is already set
        environment: Deployment environment, ENVIRONMENT env var when omitted
        log_level: Root log level name
        log_to_file: Also log to a rotating file, LOG_TO_FILE env var when omitted
        log_file_path: File path, LOG_FILE_PATH env var or
            ``/app/logs/{service_name}.log`` when omitted

    LOG_MAX_BYTES and LOG_BACKUP_COUNT tune the rotation.
    """
    environment = environment or os.getenv("ENVIRONMENT", "development")
    os.environ.setdefault("SERVICE_NAME", service_name)
    os.environ.setdefault("ENVIRONMENT", environment)

    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "false").lower() in TRUTHY

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        handlers.append(_rotating_file_handler(service_name, log_file_path))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    structlog.configure(
        processors=_gateway_processors(_wants_json(environment)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_service_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound to ``logger_name`` when a name is given."""
    logger = structlog.get_logger()
    return logger.bind(logger_name=name) if name else logger


def bind_request_context(correlation_id: str, **fields: Any) -> None:
    """Replace the request log context with a correlation ID and extra fields."""
    clear_contextvars()
    bind_contextvars(correlation_id=correlation_id, **fields)


def clear_request_context() -> None:
    clear_contextvars()
