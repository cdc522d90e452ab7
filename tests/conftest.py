from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from common.config import Settings
from common.db import get_engine
from readings_api.alerts.notifier import AlertNotifier
from readings_api.broadcast.hub import BroadcastHub
from readings_api.main import create_app
from readings_api.storage.reading_store import ReadingStore

WEBHOOK_URL = "http://hooks.test/alert"


def make_settings(db_path: Path, webhook_url: str | None = None) -> Settings:
    return Settings(
        database_url=f"sqlite:///{db_path}",
        alert_webhook_url=webhook_url,
        alert_timeout_seconds=1.0,
        alert_max_workers=1,
        subscriber_queue_size=8,
        cors_origins=("*",),
        host="127.0.0.1",
        port=3000,
        log_level="DEBUG",
    )


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "readings.db"


@pytest.fixture
def engine(db_path):
    engine = get_engine(url=f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> ReadingStore:
    store = ReadingStore(engine)
    store.initialize()
    return store


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub(queue_size=8)


@pytest.fixture
def client(db_path):
    """App sin webhook configurado."""
    app = create_app(make_settings(db_path))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def alerting_client(db_path):
    """App con webhook configurado (requests.post debe parchearse en el test)."""
    app = create_app(make_settings(db_path, webhook_url=WEBHOOK_URL))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def notifier() -> AlertNotifier:
    notifier = AlertNotifier(WEBHOOK_URL, timeout_seconds=1.0, max_workers=1)
    yield notifier
    notifier.shutdown()
