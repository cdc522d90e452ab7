from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.config import Settings, get_settings
from common.db import get_engine

from . import __version__
from .alerts.notifier import AlertNotifier
from .broadcast.hub import BroadcastHub
from .endpoints import health_router, readings_router, stream_router
from .errors import ReadingsError
from .pipelines.ingestion import IngestionPipeline
from .schemas import VALIDATION_ERROR_MESSAGE
from .storage.reading_store import ReadingStore

logger = logging.getLogger(__name__)


async def _readings_error_handler(request: Request, exc: ReadingsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("[API] Rejected %s %s errors=%s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": VALIDATION_ERROR_MESSAGE})


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ReadingStore] = None,
    hub: Optional[BroadcastHub] = None,
    notifier: Optional[AlertNotifier] = None,
) -> FastAPI:
    """Construye la app con sus componentes.

    Cada componente puede inyectarse (tests); si no, se crea desde settings.
    Uvicorn: ``uvicorn --factory readings_api.main:create_app``.
    """
    settings = settings or get_settings()

    store = store or ReadingStore(get_engine(settings))
    hub = hub or BroadcastHub(queue_size=settings.subscriber_queue_size)
    notifier = notifier or AlertNotifier(
        settings.alert_webhook_url,
        timeout_seconds=settings.alert_timeout_seconds,
        max_workers=settings.alert_max_workers,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.initialize()
        logger.info("[API] Readings service started alerts_enabled=%s", notifier.enabled)
        try:
            yield
        finally:
            hub.close_all()
            notifier.shutdown()
            logger.info("[API] Readings service stopped")

    app = FastAPI(title="Weather Readings Service", version=__version__, lifespan=lifespan)

    app.state.settings = settings
    app.state.store = store
    app.state.hub = hub
    app.state.notifier = notifier
    app.state.pipeline = IngestionPipeline(store, hub, notifier)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ReadingsError, _readings_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    app.include_router(health_router)
    app.include_router(readings_router)
    app.include_router(stream_router)

    return app
