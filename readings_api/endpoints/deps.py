"""Dependencias compartidas: componentes vivos en ``app.state``."""

from __future__ import annotations

from fastapi.requests import HTTPConnection

from ..broadcast.hub import BroadcastHub
from ..pipelines.ingestion import IngestionPipeline
from ..storage.reading_store import ReadingStore


def get_store(conn: HTTPConnection) -> ReadingStore:
    return conn.app.state.store


def get_hub(conn: HTTPConnection) -> BroadcastHub:
    return conn.app.state.hub


def get_pipeline(conn: HTTPConnection) -> IngestionPipeline:
    return conn.app.state.pipeline
