"""Modelo de dominio para lecturas de temperatura/humedad."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Reading:
    """Lectura persistida - modelo canónico de dominio.

    Es el único objeto que fluye por el pipeline:
    HTTP → Store → Hub (WebSocket) → Alert sink.
    La respuesta HTTP, el broadcast y la alerta usan la MISMA instancia.

    ``id`` y ``created_at`` los asigna el store, nunca el cliente.
    """

    id: int
    temperature: float
    humidity: float
    created_at: str  # ISO-8601 UTC, e.g. 2024-05-01T12:00:00.000Z

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Reading":
        return cls(
            id=int(row["id"]),
            temperature=float(row["temperature"]),
            humidity=float(row["humidity"]),
            created_at=str(row["created_at"]),
        )

    def to_dict(self) -> dict:
        return asdict(self)
