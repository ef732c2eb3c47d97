"""Structured logging helpers shared by entry points."""

from __future__ import annotations

import contextvars
import json
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

_CORRELATION_ID_CTX: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_CONFIGURED_SERVICES: set[str] = set()


class CorrelationIdFilter(logging.Filter):
    """Inject the active correlation identifier into log records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self._service_name
        record.correlation_id = _CORRELATION_ID_CTX.get()
        return True


class JsonLogFormatter(logging.Formatter):
    """Format log records as JSON with a consistent schema."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "service": getattr(record, "service", self._service_name),
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            payload["correlation_id"] = correlation_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        reserved = _reserved_log_keys()
        for key, value in record.__dict__.items():
            if key in reserved or key in payload:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except TypeError:
                payload[key] = str(value)
        return json.dumps(payload, default=str)


def _reserved_log_keys() -> set[str]:
    return {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Tag every record logged inside the block with one correlation id."""

    value = correlation_id or uuid.uuid4().hex
    token = _CORRELATION_ID_CTX.set(value)
    try:
        yield value
    finally:
        _CORRELATION_ID_CTX.reset(token)


def configure_logging(service_name: str, level: int = logging.INFO) -> None:
    """Configure structured logging on the root logger."""

    if service_name in _CONFIGURED_SERVICES:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(service_name))
    handler.addFilter(CorrelationIdFilter(service_name))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _CONFIGURED_SERVICES.add(service_name)


def get_correlation_id() -> Optional[str]:
    """Return the correlation identifier for the active context."""

    return _CORRELATION_ID_CTX.get()
