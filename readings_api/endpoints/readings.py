"""Endpoints de lecturas: ingesta y consultas."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ..pipelines.ingestion import IngestionPipeline
from ..schemas import ErrorOut, ReadingIn, ReadingOut
from ..storage.reading_store import DEFAULT_RECENT_LIMIT, ReadingStore
from .deps import get_pipeline, get_store

router = APIRouter(prefix="/api/readings", tags=["readings"])
logger = logging.getLogger(__name__)


def parse_limit(raw: Optional[str]) -> int:
    """``limit`` ausente, no numérico o <= 0 → valor por defecto."""
    if raw is None:
        return DEFAULT_RECENT_LIMIT
    try:
        limit = int(float(raw.strip()))
    except (ValueError, OverflowError):
        return DEFAULT_RECENT_LIMIT
    return limit if limit > 0 else DEFAULT_RECENT_LIMIT


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ReadingOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def create_reading(
    payload: ReadingIn,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    reading = await pipeline.ingest(payload.temperature, payload.humidity)
    return reading.to_dict()


@router.get("", response_model=List[ReadingOut])
def list_recent_readings(
    limit: Optional[str] = None,
    store: ReadingStore = Depends(get_store),
):
    return [r.to_dict() for r in store.recent(parse_limit(limit))]


@router.get(
    "/latest",
    response_model=ReadingOut,
    responses={404: {"model": ErrorOut}},
)
def get_latest_reading(store: ReadingStore = Depends(get_store)):
    return store.latest().to_dict()
