# airmaint/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# ids from clients end up in every log line; anything else is replaced
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def _incoming_id(request: Request) -> str | None:
    # header lookup is case-insensitive, so X-Request-Id is covered too
    rid = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    return rid if _SAFE_ID.match(rid) else None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id: the caller's X-Request-ID when it looks sane,
    a fresh UUID4 otherwise. The id is put on request.state, in request_id_ctx for
    the log formatter, and on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = _incoming_id(request) or str(uuid.uuid4())
        request.state.request_id = rid

        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
