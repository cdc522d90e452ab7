"""Tests del alert sink (webhook de temperatura alta).

Ejecutar:
    pytest tests/test_alert_notifier.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from readings_api.alerts.notifier import AlertNotifier, build_alert_message
from readings_api.core.domain.reading import Reading

from .conftest import WEBHOOK_URL


def _reading(temperature: float, humidity: float = 40.0) -> Reading:
    return Reading(id=7, temperature=temperature, humidity=humidity, created_at="2024-05-01T12:00:00.000Z")


@pytest.fixture
def mock_post():
    with patch("readings_api.alerts.notifier.requests.post") as post:
        post.return_value = MagicMock(ok=True, status_code=204, text="")
        yield post


class TestMessage:
    def test_one_decimal_place(self):
        message = build_alert_message(_reading(35.04, 40.06))

        assert "35.0°C" in message
        assert "40.1%" in message
        assert "HIGH TEMPERATURE ALERT" in message


class TestThreshold:
    def test_above_threshold_dispatches(self, notifier, mock_post):
        future = notifier.notify(_reading(35.0))

        assert future is not None
        assert future.result(timeout=5) is True
        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == WEBHOOK_URL
        assert "35.0°C" in kwargs["json"]["content"]
        assert "40.0%" in kwargs["json"]["content"]
        assert notifier.metrics["sent"] == 1

    @pytest.mark.parametrize("temperature", [25.0, 30.0])
    def test_at_or_below_threshold_is_noop(self, notifier, mock_post, temperature):
        assert notifier.notify(_reading(temperature)) is None
        notifier.flush(timeout=5)
        mock_post.assert_not_called()

    def test_no_webhook_is_noop(self, mock_post):
        notifier = AlertNotifier(None)

        assert notifier.enabled is False
        assert notifier.notify(_reading(45.0)) is None
        mock_post.assert_not_called()


class TestTransportFailures:
    def test_connection_error_is_contained(self, notifier, mock_post):
        mock_post.side_effect = requests.ConnectionError("boom")

        future = notifier.notify(_reading(35.0))

        assert future.result(timeout=5) is False
        assert notifier.metrics["failed"] == 1
        # sin reintentos
        assert mock_post.call_count == 1

    def test_error_status_is_contained(self, notifier, mock_post):
        mock_post.return_value = MagicMock(ok=False, status_code=500, text="oops")

        future = notifier.notify(_reading(35.0))

        assert future.result(timeout=5) is False
        assert notifier.metrics["failed"] == 1

    def test_notifier_keeps_working_after_failure(self, notifier, mock_post):
        mock_post.side_effect = [requests.Timeout("slow"), MagicMock(ok=True, status_code=204, text="")]

        assert notifier.notify(_reading(35.0)).result(timeout=5) is False
        assert notifier.notify(_reading(36.0)).result(timeout=5) is True
