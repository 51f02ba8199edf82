from __future__ import annotations
"""Structured logging utilities."""

import json
import logging
from datetime import datetime, timezone


_STANDARD_RECORD_KEYS = {
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

LOG_FORMATS = ("json", "plain")


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
    }


class JsonLogFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class PlainLogFormatter(logging.Formatter):
    """Single-line human format: `LEVEL event message key=value ...`."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _extra_fields(record)
        event = fields.pop("event", None)
        parts = [record.levelname]
        if event:
            parts.append(str(event))
        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in fields.items())
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Configure root logger with JSON (default) or plain structured output."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unsupported log format '{log_format}'. Allowed values: {', '.join(LOG_FORMATS)}")

    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter() if log_format == "json" else PlainLogFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())
