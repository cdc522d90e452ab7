"""In-memory broadcast hub: lecturas persistidas → subscribers WebSocket.

Cada subscriber tiene su propia cola acotada. Publicar nunca espera a
ningún cliente: si la cola está llena (cliente lento) o el subscriber ya
está cerrado, ese subscriber se expulsa y el resto recibe el mensaje.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from typing import Optional, Set

from ..core.domain.reading import Reading
from ..errors import DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 64

NEW_READING = "new-reading"
LATEST_READING = "latest-reading"

_subscriber_ids = itertools.count(1)


def envelope(message_type: str, reading: Reading) -> dict:
    return {"type": message_type, "data": reading.to_dict()}


class Subscriber:
    """Handle de un canal de salida (una conexión de dashboard)."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.id = next(_subscriber_ids)
        # None is the end-of-stream marker.
        self._queue: asyncio.Queue[Optional[dict]] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, message: dict) -> None:
        """Encola sin bloquear.

        Raises:
            DeliveryError: si el subscriber está cerrado o su cola llena.
        """
        if self._closed:
            raise DeliveryError(f"subscriber {self.id} is closed")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            raise DeliveryError(f"subscriber {self.id} queue full") from None

    async def next_message(self) -> Optional[dict]:
        """Siguiente mensaje, o None cuando el subscriber fue cerrado."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def close(self) -> None:
        """Descarta lo pendiente y despierta al consumidor. Idempotente."""
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    def __repr__(self) -> str:
        return f"Subscriber(id={self.id}, closed={self._closed})"


class BroadcastHub:
    """Registro de subscribers con publish-a-todos y sync inicial por subscriber.

    El set de subscribers se comparte entre el endpoint de ingesta y las
    conexiones WebSocket; todo acceso pasa por ``_lock``.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: Set[Subscriber] = set()
        self._lock = threading.Lock()

        # Metrics
        self._published = 0
        self._evicted = 0

    def subscribe(self) -> Subscriber:
        subscriber = Subscriber(self._queue_size)
        with self._lock:
            self._subscribers.add(subscriber)
            total = len(self._subscribers)
        logger.info("[HUB] Subscribed id=%d total=%d", subscriber.id, total)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> bool:
        """Da de baja al subscriber. Devuelve False si ya no estaba."""
        with self._lock:
            present = subscriber in self._subscribers
            self._subscribers.discard(subscriber)
            total = len(self._subscribers)
        subscriber.close()
        if present:
            logger.info("[HUB] Unsubscribed id=%d total=%d", subscriber.id, total)
        return present

    def publish_new_reading(self, reading: Reading) -> int:
        """Envía ``new-reading`` a todos los subscribers actuales.

        Returns:
            Cantidad de subscribers que recibieron el mensaje.
        """
        message = envelope(NEW_READING, reading)
        with self._lock:
            targets = list(self._subscribers)
            self._published += 1

        delivered = 0
        for subscriber in targets:
            if self._deliver(subscriber, message):
                delivered += 1

        logger.debug("[HUB] Published id=%d delivered=%d/%d", reading.id, delivered, len(targets))
        return delivered

    def sync_latest(self, subscriber: Subscriber, reading: Optional[Reading]) -> bool:
        """Envía ``latest-reading`` solo a este subscriber, si hay lectura."""
        if reading is None:
            return False
        return self._deliver(subscriber, envelope(LATEST_READING, reading))

    def _deliver(self, subscriber: Subscriber, message: dict) -> bool:
        try:
            subscriber.offer(message)
            return True
        except DeliveryError as e:
            logger.warning("[HUB] Delivery failed, evicting: %s", e)
            with self._lock:
                self._evicted += 1
            self.unsubscribe(subscriber)
            return False

    def close_all(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscriber in subscribers:
            subscriber.close()
        if subscribers:
            logger.info("[HUB] Closed %d subscribers", len(subscribers))

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    @property
    def metrics(self) -> dict:
        with self._lock:
            return {
                "subscribers": len(self._subscribers),
                "published": self._published,
                "evicted": self._evicted,
            }
