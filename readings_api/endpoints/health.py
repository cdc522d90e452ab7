"""Health and readiness endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from common.db import ping

from ..storage.reading_store import ReadingStore
from .deps import get_store

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    """Liveness probe — always returns ok if process is running."""
    return {
        "status": "ok",
        "hub": request.app.state.hub.metrics,
        "alerts": request.app.state.notifier.metrics,
    }


@router.get("/ready")
def ready(store: ReadingStore = Depends(get_store)):
    """Readiness probe — checks DB connectivity."""
    if not ping(store.engine):
        return JSONResponse(status_code=503, content={"error": "not ready"})
    return {"status": "ready"}
