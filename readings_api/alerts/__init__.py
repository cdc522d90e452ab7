"""Alertas de temperatura alta vía webhook."""

from .notifier import ALERT_TEMPERATURE_THRESHOLD, AlertNotifier, build_alert_message

__all__ = ["ALERT_TEMPERATURE_THRESHOLD", "AlertNotifier", "build_alert_message"]
