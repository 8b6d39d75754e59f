# airmaint/main.py
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware
from .routers.apartments import router as apartments_router
from .routers.auth import router as auth_router
from .routers.cities import router as cities_router
from .routers.dashboard import router as dashboard_router
from .routers.materials import router as materials_router
from .routers.meta import debug_router, router as meta_router
from .routers.purchase_orders import router as purchase_orders_router
from .routers.tasks import router as tasks_router
from .routers.users import router as users_router
from .services.evidence import EvidenceRejected
from .storage import ConflictError, NotFoundError, Storage, build_storage

API_PREFIX = "/api"

log = logging.getLogger("airmaint")


def _cors_origins(settings: Settings) -> list[str]:
    val = settings.cors_allow_origins
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http(_request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": str(exc)})

    @app.exception_handler(ConflictError)
    async def _conflict(_request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"message": str(exc)})

    @app.exception_handler(EvidenceRejected)
    async def _upload(_request: Request, exc: EvidenceRejected):
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        message = "Internal Server Error" if settings.is_production else (str(exc) or "Internal Server Error")
        return JSONResponse(status_code=500, content={"message": message})


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """
    Builds the application. The store is chosen here (or injected, as the tests
    do) and shared through app.state.storage.
    """
    settings = settings or default_settings
    configure_logging()

    owns_storage = storage is None
    if storage is None:
        storage = build_storage(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        if owns_storage and hasattr(storage, "dispose"):
            storage.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.started_at = time.time()

    # last added runs first: request id is set before the request line is logged
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app, settings)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    app.include_router(meta_router)

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(cities_router, prefix=API_PREFIX)
    app.include_router(apartments_router, prefix=API_PREFIX)
    app.include_router(tasks_router, prefix=API_PREFIX)
    app.include_router(materials_router, prefix=API_PREFIX)
    app.include_router(purchase_orders_router, prefix=API_PREFIX)
    app.include_router(dashboard_router, prefix=API_PREFIX)

    if settings.enable_debug_routes:
        app.include_router(debug_router, prefix=API_PREFIX)

    log.info("app ready", extra={"backend": storage.backend})
    return app
