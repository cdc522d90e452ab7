from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


def _redacted(url: str) -> str:
    return make_url(url).render_as_string(hide_password=True)


def get_engine(settings: Settings | None = None, url: str | None = None) -> Engine:
    """Build the SQLAlchemy engine backing the reading store.

    SQLite is the default backend; the connection is shared across the
    worker threads FastAPI runs sync code on, so ``check_same_thread``
    is disabled. Serialisation of writes is the store's job.
    """
    url = url or (settings or get_settings()).database_url

    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared in-memory database, not one per pooled connection.
            kwargs["poolclass"] = StaticPool

    logger.info("[DB] Crear engine url=%s", _redacted(url))

    engine = create_engine(url, pool_pre_ping=True, future=True, **kwargs)

    # Test de conexión: ayuda a ver en logs si el servicio realmente llega a la BD
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Test de conexión OK")
    except Exception:
        logger.exception("[DB] Test de conexión FALLÓ")

    return engine


def ping(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("[DB] Ping failed")
        return False
