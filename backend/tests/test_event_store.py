import unittest
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from pymongo.errors import ServerSelectionTimeoutError

from helpers import FixedClock, make_store
from log_governance.core.exceptions import InvalidEnvironment, StoreUnavailable
from log_governance.entities.enums import SeverityLevel
from log_governance.repositories.event_store import EventStore

NOW = datetime(2026, 3, 1, 12, 0, 0)


class TestEventStoreAppend(unittest.TestCase):
    def setUp(self):
        self.clock = FixedClock(NOW)
        self.store = make_store(clock=self.clock)

    def test_append_stamps_expiry_from_retention(self):
        entry_id = self.store.append(
            level=SeverityLevel.WARNING,
            category="user_action",
            message="stock adjusted",
            environment="production",
        )
        entry = self.store.get(entry_id)
        self.assertEqual(entry.timestamp, NOW)
        self.assertEqual(entry.expires_at, NOW + timedelta(days=30))
        self.assertEqual(entry.level, "warning")
        self.assertEqual(entry.level_rank, SeverityLevel.WARNING.rank)
        self.assertEqual(entry.priority, "normal")

    def test_ids_are_monotonic(self):
        ids = [
            self.store.append("info", "user_action", f"event {i}", "development")
            for i in range(5)
        ]
        self.assertEqual(ids, sorted(ids))
        self.assertEqual(len(set(ids)), 5)

    def test_unknown_environment_writes_nothing(self):
        with self.assertRaises(InvalidEnvironment) as ctx:
            self.store.append("error", "user_action", "boom", "qa-cluster")
        self.assertEqual(ctx.exception.environment, "qa-cluster")
        self.assertEqual(self.store.count(), 0)

    def test_store_failure_surfaces_as_unavailable(self):
        db = MagicMock()
        store = EventStore(db, clock=self.clock, create_indexes=False)
        store.counters.find_one_and_update.return_value = {"seq": 1}
        store.collection.insert_one.side_effect = ServerSelectionTimeoutError("down")
        with self.assertRaises(StoreUnavailable):
            store.append("error", "user_action", "boom", "production")


class TestEventStoreQuery(unittest.TestCase):
    def setUp(self):
        self.clock = FixedClock(NOW)
        self.store = make_store(clock=self.clock)
        self.ids = {}
        for offset, (level, category) in enumerate(
            [
                ("debug", "user_action"),
                ("info", "security"),
                ("warning", "user_action"),
                ("error", "critical_operation"),
                ("critical", "system_action"),
            ]
        ):
            self.clock.now = NOW + timedelta(minutes=offset)
            self.ids[level] = self.store.append(level, category, f"{level} event", "development")

    def test_newest_first(self):
        levels = [entry.level for entry in self.store.query()]
        self.assertEqual(levels, ["critical", "error", "warning", "info", "debug"])

    def test_level_min_filter(self):
        levels = [entry.level for entry in self.store.query(level_min=SeverityLevel.WARNING)]
        self.assertEqual(levels, ["critical", "error", "warning"])

    def test_category_and_date_range_filters(self):
        entries = list(self.store.query(category="user_action"))
        self.assertEqual([e.level for e in entries], ["warning", "debug"])

        window = self.store.query(
            start_date=NOW + timedelta(minutes=1),
            end_date=NOW + timedelta(minutes=3),
        )
        self.assertEqual([e.level for e in window], ["error", "warning", "info"])

    def test_query_is_restartable(self):
        query = self.store.query(level_min="error")
        first = [e.id for e in query]
        second = [e.id for e in query]
        self.assertEqual(first, second)
        self.assertEqual(query.count(), 2)

    def test_page(self):
        page = self.store.query().page(skip=1, limit=2)
        self.assertEqual([e.level for e in page], ["error", "warning"])


class TestEventStoreDeleteExpired(unittest.TestCase):
    def setUp(self):
        self.clock = FixedClock(NOW - timedelta(days=200))
        self.store = make_store(clock=self.clock)

    def test_delete_expired_is_idempotent(self):
        for level in ("info", "warning", "error"):
            self.store.append(level, "user_action", "old", "production")
        self.clock.now = NOW
        fresh_id = self.store.append("info", "security", "fresh", "production")

        self.assertEqual(self.store.delete_expired(NOW), 3)
        self.assertEqual(self.store.delete_expired(NOW), 0)
        self.assertIsNotNone(self.store.get(fresh_id))

    def test_expiry_boundary_is_inclusive(self):
        self.clock.now = NOW
        self.store.append("info", "security", "edge", "production")
        self.assertEqual(self.store.delete_expired(NOW + timedelta(days=7) - timedelta(seconds=1)), 0)
        self.assertEqual(self.store.delete_expired(NOW + timedelta(days=7)), 1)

    def test_batch_delete_respects_limit(self):
        for i in range(5):
            self.store.append("info", "user_action", f"old {i}", "development")
        self.assertEqual(self.store.count_expired(NOW), 5)
        self.assertEqual(self.store.delete_expired_batch(NOW, limit=3), 3)
        self.assertEqual(self.store.delete_expired_batch(NOW, limit=3), 2)
        self.assertEqual(self.store.delete_expired_batch(NOW, limit=3), 0)

    def test_delete_failure_surfaces_as_unavailable(self):
        db = MagicMock()
        store = EventStore(db, create_indexes=False)
        store.collection.delete_many.side_effect = ServerSelectionTimeoutError("down")
        with self.assertRaises(StoreUnavailable):
            store.delete_expired(NOW)


if __name__ == "__main__":
    unittest.main()
