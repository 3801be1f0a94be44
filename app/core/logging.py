"""Logging setup and structured event helpers.

Module loggers are plain ``logging.getLogger(__name__)`` loggers. ``setup_logging``
installs one root handler whose records carry the request correlation id, and
``log_event`` attaches ``stage``/``outcome`` fields to a record so storage and
context-bridge events can be filtered by pipeline stage.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from app.core.config import LogFormatEnum, settings

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class CorrelationIdFilter(logging.Filter):
    """Inject the current request's correlation id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


SIMPLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | %(message)s"


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure the root logger once for the process."""
    level = level or settings.log_level.value
    log_format = log_format or settings.log_format.value

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if log_format == LogFormatEnum.json.value:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_case_assistant", False):
            root.removeHandler(existing)
    handler._case_assistant = True
    root.addHandler(handler)
    root.setLevel(level)


def log_event(
    logger: logging.Logger,
    stage: str,
    outcome: str,
    message: str | None = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit a structured pipeline event.

    Args:
        logger: Module logger to emit on.
        stage: Pipeline stage, e.g. ``staging``, ``blob_upload``, ``resolve_client``.
        outcome: Short result label, e.g. ``ok``, ``skipped``, ``failed``.
        message: Optional human-readable text; defaults to ``"<stage> <outcome>"``.
        level: Logging level for the record.
        **fields: Extra key/value context (file name, chat id, counts).
    """
    extra = {"stage": stage, "outcome": outcome, "correlation_id": correlation_id_var.get()}
    extra.update({k: v for k, v in fields.items() if k not in _RESERVED_ATTRS})
    logger.log(level, message or f"{stage} {outcome}", extra=extra)


__all__ = [
    "correlation_id_var",
    "CorrelationIdFilter",
    "JsonFormatter",
    "setup_logging",
    "log_event",
]
