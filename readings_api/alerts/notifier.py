"""Servicio de notificaciones para alertas de temperatura.

Dispara un POST ``{"content": ...}`` al webhook configurado (formato
Discord). No bloquea la ingesta: el envío corre en un pool de threads,
y si falla solo se loguea. Sin reintentos.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Optional, Set

import requests

from ..core.domain.reading import Reading
from ..errors import AlertTransportError

logger = logging.getLogger(__name__)

# Política fija, no configurable por request.
ALERT_TEMPERATURE_THRESHOLD = 30.0

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_WORKERS = 2


def build_alert_message(reading: Reading) -> str:
    return (
        "🔥 **HIGH TEMPERATURE ALERT!**\n"
        f"🌡️ Temp: **{reading.temperature:.1f}°C**\n"
        f"💧 Humidity: **{reading.humidity:.1f}%**"
    )


class AlertNotifier:
    """Alert sink best-effort (at-most-once).

    - Sin webhook configurado → no-op
    - temperature <= 30.0 → no-op
    - Si no, envío fire-and-forget en un worker thread
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._webhook_url = webhook_url or None
        self._timeout = timeout_seconds
        self._executor: Optional[ThreadPoolExecutor] = None
        self._max_workers = max_workers
        self._pending: Set[Future] = set()

        # Metrics
        self._sent = 0
        self._failed = 0
        self._lock = threading.Lock()

        if self._webhook_url is None:
            logger.info("[ALERT] Webhook URL not configured - alerts disabled")

    @property
    def enabled(self) -> bool:
        return self._webhook_url is not None

    def should_alert(self, reading: Reading) -> bool:
        return self.enabled and reading.temperature > ALERT_TEMPERATURE_THRESHOLD

    def notify(self, reading: Reading) -> Optional[Future]:
        """Programa la alerta si corresponde. Nunca lanza por fallos de transporte.

        Returns:
            El Future del envío, o None si no se envía nada.
        """
        if not self.should_alert(reading):
            return None

        message = build_alert_message(reading)
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="alert-webhook",
                )
            future = self._executor.submit(self._dispatch, reading.id, message)
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _dispatch(self, reading_id: int, message: str) -> bool:
        try:
            self._post(message)
        except AlertTransportError as e:
            with self._lock:
                self._failed += 1
            logger.error("[ALERT] Webhook error reading_id=%d: %s", reading_id, e)
            return False
        except Exception:
            with self._lock:
                self._failed += 1
            logger.exception("[ALERT] Unexpected error reading_id=%d", reading_id)
            return False

        with self._lock:
            self._sent += 1
        logger.info("[ALERT] High temperature alert sent reading_id=%d", reading_id)
        return True

    def _post(self, message: str) -> None:
        try:
            response = requests.post(
                self._webhook_url,
                json={"content": message},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise AlertTransportError(str(e)) from e

        if not response.ok:
            raise AlertTransportError(f"{response.status_code} {response.text}")

    def flush(self, timeout: Optional[float] = None) -> None:
        """Espera a que terminen los envíos en curso."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait_pending: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait_pending)
            logger.info("[ALERT] Stopped. %s", self.metrics)

    @property
    def metrics(self) -> dict:
        with self._lock:
            return {
                "enabled": self.enabled,
                "pending": len(self._pending),
                "sent": self._sent,
                "failed": self._failed,
            }
