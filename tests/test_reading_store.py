"""Tests del reading store.

Ejecutar:
    pytest tests/test_reading_store.py -v
"""

import re
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text

from readings_api.errors import NotFoundError, ReadingValidationError, StorageError
from readings_api.storage.reading_store import ReadingStore

ISO_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestInsert:
    def test_assigns_id_and_created_at(self, store):
        reading = store.insert(22.5, 60.1)

        assert reading.id == 1
        assert reading.temperature == 22.5
        assert reading.humidity == 60.1
        assert ISO_UTC.match(reading.created_at)

    def test_ids_strictly_increasing(self, store):
        ids = [store.insert(20.0 + i, 50.0).id for i in range(5)]
        assert ids == [1, 2, 3, 4, 5]

    def test_concurrent_inserts_get_unique_gapless_ids(self, store):
        n = 40
        with ThreadPoolExecutor(max_workers=8) as pool:
            readings = list(pool.map(lambda i: store.insert(float(i), 50.0), range(n)))

        ids = sorted(r.id for r in readings)
        assert ids == list(range(1, n + 1))

        # created_at never goes backwards in id order
        by_id = sorted(readings, key=lambda r: r.id)
        stamps = [r.created_at for r in by_id]
        assert stamps == sorted(stamps)

    def test_write_failure_raises_storage_error(self, store, engine):
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE readings"))

        with pytest.raises(StorageError):
            store.insert(22.0, 50.0)

    def test_survives_restart(self, store, engine):
        first = store.insert(21.0, 40.0)

        reopened = ReadingStore(engine)
        reopened.initialize()
        second = reopened.insert(22.0, 41.0)

        assert reopened.latest() == second
        assert second.id == first.id + 1
        assert second.created_at >= first.created_at


class TestLatest:
    def test_empty_store_raises_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.latest()
        assert store.latest_or_none() is None

    def test_returns_last_inserted(self, store):
        readings = [store.insert(20.0 + i, 50.0 + i) for i in range(4)]
        assert store.latest() == readings[-1]

    def test_ties_on_created_at_broken_by_id(self, store, engine):
        with engine.begin() as conn:
            for t in (10.0, 11.0, 12.0):
                conn.execute(
                    text(
                        "INSERT INTO readings (temperature, humidity, created_at) "
                        "VALUES (:t, 50.0, '2024-01-01T00:00:00.000Z')"
                    ),
                    {"t": t},
                )

        latest = store.latest()
        assert latest.id == 3
        assert latest.temperature == 12.0


class TestRecent:
    def test_newest_first_and_bounded(self, store):
        readings = [store.insert(20.0 + i, 50.0) for i in range(5)]

        recent = store.recent(limit=2)

        assert [r.id for r in recent] == [readings[4].id, readings[3].id]

    def test_returns_min_of_limit_and_count(self, store):
        for i in range(3):
            store.insert(20.0 + i, 50.0)

        assert len(store.recent(limit=10)) == 3
        assert len(store.recent()) == 3

    def test_prefix_consistent(self, store):
        for i in range(6):
            store.insert(20.0 + i, 50.0)

        assert store.recent(2) == store.recent(5)[:2]

    def test_empty_store(self, store):
        assert store.recent() == []

    def test_limit_beyond_sql_range(self, store):
        reading = store.insert(22.0, 50.0)

        assert store.recent(10**30) == [reading]

    @pytest.mark.parametrize("limit", [0, -1, True])
    def test_rejects_non_positive_limit(self, store, limit):
        with pytest.raises(ReadingValidationError):
            store.recent(limit)
