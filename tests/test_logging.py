# tests/test_logging.py
from __future__ import annotations

import json
import logging

from airmaint.logging_config import JsonFormatter
from airmaint.middleware.request_id import request_id_ctx


def _record(**extra) -> logging.LogRecord:
    rec = logging.LogRecord("airmaint.tasks", logging.INFO, __file__, 1, "task %s", ("completed",), None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_json_lines_carry_request_id_and_extras():
    token = request_id_ctx.set("rid-1")
    try:
        line = JsonFormatter().format(_record(task_id="MT-0001", apartment_id=3, unrelated="x"))
    finally:
        request_id_ctx.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "task completed"
    assert payload["service"] == "airmaint"
    assert payload["request_id"] == "rid-1"
    assert payload["task_id"] == "MT-0001"
    assert payload["apartment_id"] == 3
    assert "unrelated" not in payload


def test_json_lines_without_request_context():
    payload = json.loads(JsonFormatter().format(_record()))
    assert "request_id" not in payload
    assert payload["level"] == "INFO"
