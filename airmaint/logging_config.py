# airmaint/logging_config.py
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from .middleware.request_id import get_request_id

SERVICE_NAME = "airmaint"

# structured extras a log call may attach via extra={...}
EXTRA_KEYS = ("backend", "task_id", "apartment_id", "purchase_order_id", "attempt")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line: ts, level, service, logger, message, plus the current
    request_id, any EXTRA_KEYS present on the record, and exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = get_request_id()
        if rid:
            payload["request_id"] = rid

        payload.update({k: getattr(record, k) for k in EXTRA_KEYS if hasattr(record, k)})

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable variant for local runs (LOG_FORMAT=text)."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        rid = get_request_id()
        return f"{line} [rid={rid}]" if rid else line


def configure_logging() -> None:
    level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    fmt = (os.getenv("LOG_FORMAT") or "json").strip().lower()

    root = logging.getLogger()
    root.setLevel(level)

    # create_app() may run more than once per process (reload, tests)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(TextFormatter() if fmt == "text" else JsonFormatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel((os.getenv("SQL_LOG_LEVEL") or "WARNING").upper())
