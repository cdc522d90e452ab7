"""Persistencia de lecturas (append-only)."""

from .reading_store import DEFAULT_RECENT_LIMIT, ReadingStore
from .schema import ensure_schema, readings_table

__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "ReadingStore",
    "ensure_schema",
    "readings_table",
]
