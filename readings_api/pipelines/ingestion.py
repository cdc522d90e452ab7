"""Orquestación de una lectura entrante.

Received → Validated → Persisted → Broadcast-issued → Alert-issued → Responded

La validación ocurre antes (schema pydantic en el endpoint); aquí solo
entran lecturas válidas.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi.concurrency import run_in_threadpool

from ..alerts.notifier import AlertNotifier
from ..broadcast.hub import BroadcastHub, Subscriber
from ..core.domain.reading import Reading
from ..storage.reading_store import ReadingStore

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Store → Hub → Sink, en ese orden.

    Insert y publish se hacen bajo el mismo lock, así el orden de
    broadcast es el orden de inserción aunque lleguen requests
    concurrentes. La alerta queda fuera del lock: nunca retrasa
    al dashboard.
    """

    def __init__(self, store: ReadingStore, hub: BroadcastHub, notifier: AlertNotifier) -> None:
        self._store = store
        self._hub = hub
        self._notifier = notifier
        self._lock = asyncio.Lock()

    async def ingest(self, temperature: float, humidity: float) -> Reading:
        """Persiste y distribuye una lectura.

        Raises:
            StorageError: la escritura falló; no hay broadcast ni alerta.
        """
        async with self._lock:
            # The durable write blocks; keep it off the event loop.
            reading = await run_in_threadpool(self._store.insert, temperature, humidity)
            delivered = self._hub.publish_new_reading(reading)

        self._notifier.notify(reading)

        logger.info(
            "[INGEST] id=%d temperature=%.1f humidity=%.1f subscribers=%d",
            reading.id,
            reading.temperature,
            reading.humidity,
            delivered,
        )
        return reading

    async def open_subscription(self) -> Subscriber:
        """Registra un subscriber y le envía la última lectura, si existe.

        Se hace bajo el lock de ingesta: el subscriber recibe la última
        lectura y después solo lecturas más nuevas, sin huecos ni duplicados.
        """
        async with self._lock:
            latest = await run_in_threadpool(self._store.latest_or_none)
            subscriber = self._hub.subscribe()
            self._hub.sync_latest(subscriber, latest)
        return subscriber
