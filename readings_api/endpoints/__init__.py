"""Módulo de endpoints HTTP y WebSocket."""

from .health import router as health_router
from .readings import router as readings_router
from .stream import router as stream_router

__all__ = [
    "health_router",
    "readings_router",
    "stream_router",
]
