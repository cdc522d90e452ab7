"""Errores del dominio de ingesta.

Solo ReadingValidationError y StorageError llegan al cliente HTTP
(400 / 500). NotFoundError es el estado vacío legítimo (404).
DeliveryError y AlertTransportError se contienen donde ocurren.
"""

from __future__ import annotations


class ReadingsError(Exception):
    """Base de todos los errores del servicio."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ReadingValidationError(ReadingsError):
    status_code = 400


class StorageError(ReadingsError):
    status_code = 500


class NotFoundError(ReadingsError):
    status_code = 404


class DeliveryError(ReadingsError):
    """Fallo al entregar un mensaje a un subscriber concreto."""


class AlertTransportError(ReadingsError):
    """Fallo del webhook de alertas."""
