"""
Structured JSON logging configuration.

Every log line is a single JSON object with a channel (http, db, store,
service, console), the current request ID and any business context
attached by the caller. The API logs to stdout; the console logs to
stderr so log lines never land inside the menu.
"""

import logging
import json
import os
import sys
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar
from typing import Optional, TextIO

# Request ID for the HTTP request currently being served. Console sessions
# leave it empty.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CHANNELS = ["http", "db", "store", "service", "console"]


def _channel_of(record: logging.LogRecord) -> str:
    channel = getattr(record, "channel", None)
    if channel:
        return channel
    return record.name.split(".")[-1] if record.name.startswith("app.") else "app"


class StructuredJsonFormatter(logging.Formatter):
    """
    Formatter that renders each record as one JSON object.

    Keys:
    - timestamp: ISO 8601 UTC with millisecond precision
    - level: INFO, WARNING, ERROR, DEBUG
    - message: human-readable message
    - channel: log source (http, db, store, service, console)
    - context: request_id plus business context (student_id, email, ...)
    - extra: additional metadata (duration_ms, status_code, ...)
    - exception: formatted traceback, only when one was attached
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": _channel_of(record),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None):
    """
    Install the JSON formatter on the root logger and set channel levels.

    Args:
        level: overrides LOG_LEVEL
        stream: destination for log lines, stdout when omitted
    """
    level_value = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        get_logger(channel).setLevel(level_value)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for a channel (http, db, store, service, console)."""
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info: bool = False):
    """
    Emit a structured log entry with business context and extra metadata.

    Args:
        logger: the channel logger to use
        level: DEBUG, INFO, WARNING or ERROR
        message: human-readable log message
        context: business context (student_id, email)
        extra_data: additional metadata (duration_ms, status_code)
        exc_info: attach the active exception's traceback
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        exc_info=exc_info,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": logger.name.split(".")[-1],
        }
    )


def generate_request_id() -> str:
    return str(uuid.uuid4())
