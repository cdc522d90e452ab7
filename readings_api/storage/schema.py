"""Esquema de la colección de lecturas.

Una sola tabla append-only; sin versionado ni migraciones.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, Float, Index, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

metadata = MetaData()

readings_table = Table(
    "readings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("temperature", Float, nullable=False),
    Column("humidity", Float, nullable=False),
    Column("created_at", String(32), nullable=False),
    Index("ix_readings_created_at_id", "created_at", "id"),
    # Never reuse ids, even after the highest row is gone.
    sqlite_autoincrement=True,
)


def ensure_schema(engine: Engine) -> None:
    """Crea la tabla si no existe. Safe to call multiple times."""
    logger.info("[DB] Ensuring schema exists")
    metadata.create_all(engine, checkfirst=True)
