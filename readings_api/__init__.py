"""Weather readings ingestion service.

Recibe lecturas de temperatura/humedad por HTTP, las persiste y las
reparte en tiempo real a los dashboards conectados por WebSocket.
"""

__version__ = "0.1.0"
