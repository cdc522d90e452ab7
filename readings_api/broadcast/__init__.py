"""Fan-out en tiempo real hacia los dashboards conectados."""

from .hub import BroadcastHub, Subscriber

__all__ = ["BroadcastHub", "Subscriber"]
