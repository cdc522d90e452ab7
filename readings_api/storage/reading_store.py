"""Reading store - log durable de lecturas.

Responsabilidades:
- Asignar ``id`` y ``created_at`` (nunca los aporta el cliente)
- Serializar las escrituras: dos inserts concurrentes nunca comparten id
- Consultas de última lectura y de historial reciente
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.domain.reading import Reading
from ..errors import NotFoundError, ReadingValidationError, StorageError
from .schema import ensure_schema

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 50

# Largest value a signed 64-bit LIMIT bind parameter accepts.
MAX_SQL_LIMIT = 2**63 - 1

_SELECT_COLUMNS = "SELECT id, temperature, humidity, created_at FROM readings"


def format_timestamp(ts: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and ``Z`` suffix."""
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


class ReadingStore:
    """Store append-only sobre SQLAlchemy.

    El lock interno es el único punto de serialización del sistema:
    asignación de id, timestamp y escritura ocurren juntos.
    ``created_at`` nunca retrocede respecto al insert anterior, así que
    el orden ``created_at DESC, id DESC`` coincide con el de inserción.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._lock = threading.Lock()
        self._last_created_at: Optional[str] = None

    @property
    def engine(self) -> Engine:
        return self._engine

    def initialize(self) -> None:
        """Crea el esquema y recupera el último timestamp persistido."""
        try:
            ensure_schema(self._engine)
            with self._engine.connect() as conn:
                last = conn.execute(text("SELECT MAX(created_at) FROM readings")).scalar()
        except SQLAlchemyError as e:
            logger.exception("[STORE] Schema init failed")
            raise StorageError("failed to initialize reading storage") from e

        with self._lock:
            self._last_created_at = str(last) if last is not None else None
        logger.info("[STORE] Ready last_created_at=%s", self._last_created_at)

    def _next_created_at(self) -> str:
        now = format_timestamp(datetime.now(timezone.utc))
        if self._last_created_at is not None and now < self._last_created_at:
            return self._last_created_at
        return now

    def insert(self, temperature: float, humidity: float) -> Reading:
        """Persiste una lectura y la devuelve con id y created_at asignados.

        Raises:
            StorageError: si la escritura durable falla. La lectura no existe.
        """
        with self._lock:
            created_at = self._next_created_at()
            params = {
                "temperature": float(temperature),
                "humidity": float(humidity),
                "created_at": created_at,
            }
            sql = (
                "INSERT INTO readings (temperature, humidity, created_at) "
                "VALUES (:temperature, :humidity, :created_at)"
            )
            try:
                with self._engine.begin() as conn:
                    if self._engine.dialect.insert_returning:
                        reading_id = conn.execute(text(sql + " RETURNING id"), params).scalar_one()
                    else:
                        reading_id = conn.execute(text(sql), params).lastrowid
            except SQLAlchemyError as e:
                logger.exception("[STORE] Insert failed err=%s", type(e).__name__)
                raise StorageError("failed to persist reading") from e

            self._last_created_at = created_at

        reading = Reading(
            id=int(reading_id),
            temperature=params["temperature"],
            humidity=params["humidity"],
            created_at=created_at,
        )
        logger.debug(
            "[STORE] Inserted id=%d temperature=%.2f humidity=%.2f",
            reading.id,
            reading.temperature,
            reading.humidity,
        )
        return reading

    def latest(self) -> Reading:
        """Última lectura (created_at DESC, id DESC).

        Raises:
            NotFoundError: si todavía no hay lecturas.
        """
        rows = self._select(
            _SELECT_COLUMNS + " ORDER BY created_at DESC, id DESC LIMIT 1",
            {},
        )
        if not rows:
            raise NotFoundError("No data yet")
        return rows[0]

    def latest_or_none(self) -> Optional[Reading]:
        try:
            return self.latest()
        except NotFoundError:
            return None

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[Reading]:
        """Hasta ``limit`` lecturas, la más nueva primero."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ReadingValidationError("limit must be a positive integer")

        return self._select(
            _SELECT_COLUMNS + " ORDER BY created_at DESC, id DESC LIMIT :limit",
            {"limit": min(limit, MAX_SQL_LIMIT)},
        )

    def count(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(text("SELECT COUNT(*) FROM readings")).scalar() or 0)

    def _select(self, sql: str, params: dict) -> List[Reading]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(text(sql), params).mappings().all()
        except SQLAlchemyError as e:
            logger.exception("[STORE] Query failed err=%s", type(e).__name__)
            raise StorageError("failed to read readings") from e
        return [Reading.from_row(row) for row in rows]
