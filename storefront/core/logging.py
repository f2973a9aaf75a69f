"""JSON log lines tagged with the id of the request being served."""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

_REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="")

# Attributes copied from ``extra=`` into the JSON payload.
CONTEXT_FIELDS = ("user_id", "resource_id", "path", "method", "status_code")

_CHATTY_LOGGERS = ("pymongo", "urllib3", "httpx", "multipart")


def bind_request_id(request_id: str) -> None:
    _REQUEST_ID.set(request_id)


def current_request_id() -> str:
    return _REQUEST_ID.get()


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": current_request_id(),
        }
        payload.update(
            {
                name: getattr(record, name)
                for name in CONTEXT_FIELDS
                if getattr(record, name, None) not in (None, "")
            }
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as JSON and quiet driver chatter."""
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
