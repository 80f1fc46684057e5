"""
Event Store - append-only persistence of admitted log entries.

Each entry is a single document in ``log_entries`` whose ``_id`` is an integer
allocated from the ``counters`` collection, so ids grow monotonically across
processes. ``expires_at`` is computed once, at append time, from the active
retention table and indexed so the purge cycle never scans the full collection.

Appends and purges do not coordinate: every retention window is at least one
day, so an entry written during a purge cycle always expires after that cycle's
``as_of`` and cannot be removed by it.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from log_governance.core.exceptions import (
    ConfigurationError,
    InvalidEnvironment,
    StoreUnavailable,
)
from log_governance.entities.enums import SeverityLevel, enum_value, priority_for_level
from log_governance.entities.log_entry import LogEntry
from log_governance.services.policy_registry import get_retention_policy
from log_governance.services.retention_policy import RetentionPolicyTable
from log_governance.utils.datetime import ensure_naive_utc, utc_now

from .base import BaseRepository

logger = logging.getLogger(__name__)

COUNTERS_COLLECTION = "counters"
LOG_ENTRY_SEQUENCE = "log_entries"
QUERY_SORT = [("timestamp", DESCENDING), ("_id", DESCENDING)]


class LogQuery:
    """
    Lazy, restartable view over entries matching a filter.

    Every iteration opens a fresh cursor, newest entries first. Cursor reads
    take no locks against writers.
    """

    def __init__(self, collection, query: Dict[str, Any], batch_size: int = 100):
        self._collection = collection
        self.query = query
        self.batch_size = batch_size

    def __iter__(self) -> Iterator[LogEntry]:
        try:
            cursor = (
                self._collection.find(self.query)
                .sort(QUERY_SORT)
                .batch_size(self.batch_size)
            )
            for doc in cursor:
                yield LogEntry(**doc)
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

    def page(self, skip: int = 0, limit: int = 100) -> List[LogEntry]:
        """Materialize one page of results."""
        try:
            cursor = (
                self._collection.find(self.query)
                .sort(QUERY_SORT)
                .skip(skip)
                .limit(limit)
            )
            return [LogEntry(**doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

    def count(self) -> int:
        try:
            return self._collection.count_documents(self.query)
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e


class EventStore(BaseRepository[LogEntry]):
    """Exclusive owner of persisted log entries."""

    def __init__(
        self,
        db: Database,
        retention_provider: Callable[[], RetentionPolicyTable] = get_retention_policy,
        clock: Callable[[], datetime] = utc_now,
        create_indexes: bool = True,
    ):
        super().__init__(db, "log_entries", LogEntry)
        self.counters = db[COUNTERS_COLLECTION]
        self._retention_provider = retention_provider
        self._clock = clock
        if create_indexes:
            self.ensure_indexes()

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index([("expires_at", ASCENDING)], background=True)
            self.collection.create_index([("timestamp", DESCENDING)], background=True)
            self.collection.create_index(
                [("level_rank", ASCENDING), ("timestamp", DESCENDING)], background=True
            )
            self.collection.create_index(
                [("category", ASCENDING), ("timestamp", DESCENDING)], background=True
            )
            self.collection.create_index(
                [("operation_class", ASCENDING), ("timestamp", DESCENDING)],
                background=True,
            )
            self.collection.create_index(
                [("metadata.audit.actor", ASCENDING), ("timestamp", DESCENDING)],
                background=True,
                sparse=True,
            )
        except PyMongoError as e:
            logger.warning(f"Could not ensure log_entries indexes: {e}")

    def _next_id(self) -> int:
        doc = self.counters.find_one_and_update(
            {"_id": LOG_ENTRY_SEQUENCE},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["seq"])

    def append(
        self,
        level: SeverityLevel | str,
        category: str,
        message: str,
        environment: str,
        operation_class: Optional[str] = None,
        duration_ms: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
        slow_operation: bool = False,
    ) -> int:
        """
        Persist one admitted entry and return its id.

        Raises:
            InvalidEnvironment: no retention window for the environment; nothing is written.
            StoreUnavailable: the database rejected the write.
        """
        level = SeverityLevel(enum_value(level))
        environment = enum_value(environment).lower()
        timestamp = self._clock()

        try:
            days = self._retention_provider().retention_days(environment, level)
        except ConfigurationError as e:
            raise InvalidEnvironment(environment) from e

        try:
            entry = LogEntry(
                id=self._next_id(),
                timestamp=timestamp,
                level=level,
                level_rank=level.rank,
                category=enum_value(category),
                operation_class=enum_value(operation_class) if operation_class else None,
                duration_ms=duration_ms,
                slow_operation=slow_operation,
                message=message,
                metadata=metadata or {},
                environment=environment,
                priority=priority_for_level(level).value,
                expires_at=timestamp + timedelta(days=days),
            )
            self.insert_one(entry)
        except PyMongoError as e:
            raise StoreUnavailable("append", e) from e

        return entry.id

    def get(self, entry_id: int) -> Optional[LogEntry]:
        try:
            return self.find_by_id(entry_id)
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

    def query(
        self,
        level_min: Optional[SeverityLevel | str] = None,
        category: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        operation_class: Optional[str] = None,
        environment: Optional[str] = None,
    ) -> LogQuery:
        """Build a lazy query ordered by timestamp descending."""
        query: Dict[str, Any] = {}
        if level_min is not None:
            query["level_rank"] = {"$gte": SeverityLevel(enum_value(level_min)).rank}
        if category:
            query["category"] = enum_value(category)
        if operation_class:
            query["operation_class"] = enum_value(operation_class)
        if environment:
            query["environment"] = enum_value(environment).lower()
        if start_date or end_date:
            query["timestamp"] = {}
            if start_date:
                query["timestamp"]["$gte"] = ensure_naive_utc(start_date)
            if end_date:
                query["timestamp"]["$lte"] = ensure_naive_utc(end_date)

        return LogQuery(self.collection, query)

    def delete_expired(self, as_of: datetime) -> int:
        """Delete every entry with expires_at <= as_of. Idempotent for a fixed as_of."""
        try:
            return self.delete_many({"expires_at": {"$lte": ensure_naive_utc(as_of)}})
        except PyMongoError as e:
            raise StoreUnavailable("delete_expired", e) from e

    def delete_expired_batch(self, as_of: datetime, limit: int) -> int:
        """Delete at most `limit` expired entries, oldest expiry first."""
        as_of = ensure_naive_utc(as_of)
        try:
            ids = [
                doc["_id"]
                for doc in self.collection.find(
                    {"expires_at": {"$lte": as_of}}, {"_id": 1}
                )
                .sort("expires_at", ASCENDING)
                .limit(limit)
            ]
            if not ids:
                return 0
            # Re-check expiry so the delete stays row-level safe
            return self.delete_many({"_id": {"$in": ids}, "expires_at": {"$lte": as_of}})
        except PyMongoError as e:
            raise StoreUnavailable("delete_expired", e) from e

    def count_expired(self, as_of: datetime) -> int:
        try:
            return self.count({"expires_at": {"$lte": ensure_naive_utc(as_of)}})
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

    # Reporting

    def stats_by_level_and_category(self, since: datetime, until: datetime) -> List[Dict[str, Any]]:
        pipeline = [
            {"$match": {"timestamp": {"$gte": since, "$lte": until}}},
            {
                "$group": {
                    "_id": {"level": "$level", "category": "$category"},
                    "count": {"$sum": 1},
                    "avg_duration_ms": {"$avg": "$duration_ms"},
                }
            },
            {"$sort": {"count": -1}},
        ]
        try:
            return [
                {
                    "level": row["_id"]["level"],
                    "category": row["_id"]["category"],
                    "count": row["count"],
                    "avg_duration_ms": row.get("avg_duration_ms"),
                }
                for row in self.collection.aggregate(pipeline)
            ]
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

    def performance_by_operation_class(self, since: datetime) -> List[Dict[str, Any]]:
        pipeline = [
            {
                "$match": {
                    "timestamp": {"$gte": since},
                    "duration_ms": {"$ne": None},
                    "operation_class": {"$ne": None},
                }
            },
            {
                "$group": {
                    "_id": "$operation_class",
                    "avg_duration_ms": {"$avg": "$duration_ms"},
                    "max_duration_ms": {"$max": "$duration_ms"},
                    "min_duration_ms": {"$min": "$duration_ms"},
                    "slow_operations": {"$sum": {"$cond": ["$slow_operation", 1, 0]}},
                    "total_operations": {"$sum": 1},
                }
            },
            {"$sort": {"_id": 1}},
        ]
        try:
            return [
                {
                    "operation_class": row["_id"],
                    "avg_duration_ms": row["avg_duration_ms"],
                    "max_duration_ms": row["max_duration_ms"],
                    "min_duration_ms": row["min_duration_ms"],
                    "slow_operations": row["slow_operations"],
                    "total_operations": row["total_operations"],
                }
                for row in self.collection.aggregate(pipeline)
            ]
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

    def audit_summary(
        self, since: datetime, until: datetime, actor: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Who did what: audit entries grouped by actor, resource and operation."""
        match: Dict[str, Any] = {
            "metadata.audit": {"$exists": True},
            "timestamp": {"$gte": ensure_naive_utc(since), "$lte": ensure_naive_utc(until)},
        }
        if actor:
            match["metadata.audit.actor"] = actor

        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": {
                        "actor": "$metadata.audit.actor",
                        "resource": "$metadata.audit.resource",
                        "operation": "$metadata.audit.operation",
                    },
                    "count": {"$sum": 1},
                    "last_action": {"$max": "$timestamp"},
                }
            },
            {"$sort": {"count": -1}},
        ]
        try:
            return [
                {
                    "actor": row["_id"].get("actor"),
                    "resource": row["_id"].get("resource"),
                    "operation": row["_id"].get("operation"),
                    "count": row["count"],
                    "last_action": row["last_action"],
                }
                for row in self.collection.aggregate(pipeline)
            ]
        except PyMongoError as e:
            raise StoreUnavailable("query", e) from e

