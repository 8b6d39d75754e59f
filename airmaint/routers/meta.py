# airmaint/routers/meta.py
from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ..db import get_storage
from ..storage import Storage

router = APIRouter(tags=["meta"])

# mounted under /api only when ENABLE_DEBUG_ROUTES is set
debug_router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/", response_class=PlainTextResponse)
def root():
    return "AirMaint API is running"


@router.get("/health", response_model=dict)
def health(request: Request, storage: Storage = Depends(get_storage)):
    settings = request.app.state.settings
    return {
        "status": "ok",
        "environment": settings.app_env,
        "storage": {"backend": storage.backend, "counts": storage.counts()},
        "uptime_seconds": round(time.time() - request.app.state.started_at, 3),
    }


@debug_router.get("/storage", response_model=dict)
def debug_storage(storage: Storage = Depends(get_storage)):
    return {"backend": storage.backend, "counts": storage.counts()}
