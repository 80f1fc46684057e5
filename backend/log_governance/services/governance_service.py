"""
Log Governance Service - entry point used by application modules.

Pipeline for a candidate event:
    classify (may escalate slow operations) -> admit/drop -> append with expiry

``submit`` is fire-and-forget: the work runs on a small thread pool and the caller
never learns whether the event was admitted. ``record`` runs the same pipeline
synchronously and returns the new id (or None when dropped).
"""

import logging
import os
import platform
import socket
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from pymongo.errors import PyMongoError

from log_governance.config import settings
from log_governance.core.tracing import TracingContext
from log_governance.entities.enums import (
    EventCategory,
    SeverityLevel,
    enum_value,
)
from log_governance.entities.log_entry import CandidateEvent, LogEntry
from log_governance.repositories.event_store import EventStore, LogQuery
from log_governance.services.admission_filter import should_admit
from log_governance.services.performance_classifier import classify, is_slow
from log_governance.services.policy_registry import (
    get_performance_thresholds,
    get_retention_policy,
)
from log_governance.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def get_system_info() -> Dict[str, Any]:
    """Host details attached to every persisted entry."""
    return {
        "hostname": socket.gethostname(),
        "process_id": os.getpid(),
        "platform": platform.system().lower(),
        "python_version": platform.python_version(),
    }


def describe_changes(
    before: Optional[Mapping[str, Any]], after: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Field-level diff between two snapshots of a record."""
    changes: Dict[str, Any] = {"fields": [], "details": [], "summary": ""}
    if before is None or after is None:
        return changes

    for key in sorted(set(before) | set(after)):
        old_value = before.get(key)
        new_value = after.get(key)
        if old_value != new_value:
            changes["fields"].append(key)
            changes["details"].append(
                {
                    "field": key,
                    "old_value": old_value,
                    "new_value": new_value,
                    "type": type(new_value).__name__,
                }
            )

    if changes["fields"]:
        changes["summary"] = (
            f"Modified {len(changes['fields'])} field(s): {', '.join(changes['fields'])}"
        )
    return changes


class LogGovernanceService:
    """Classifies, filters and persists operational events."""

    def __init__(
        self,
        store: EventStore,
        executor: Optional[Executor] = None,
        default_environment: Optional[str] = None,
        max_pending: Optional[int] = None,
    ):
        self.store = store
        self.default_environment = default_environment or settings.ENVIRONMENT
        self._pending = threading.BoundedSemaphore(max_pending or settings.SUBMIT_MAX_PENDING)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.SUBMIT_MAX_WORKERS,
            thread_name_prefix="log-governance",
        )

    # Submission

    def submit(
        self,
        level: SeverityLevel | str,
        category: str,
        message: str,
        operation_class: Optional[str] = None,
        duration_ms: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
        environment: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> None:
        """Fire-and-forget submission. Never raises and never reports the decision."""
        try:
            event = CandidateEvent(
                level=enum_value(level),
                category=enum_value(category),
                operation_class=enum_value(operation_class) if operation_class else None,
                duration_ms=duration_ms,
                message=message,
                metadata=dict(metadata or {}),
                environment=environment,
                tags=list(tags or []),
            )
        except ValueError as e:
            logger.error(f"Discarding malformed log event '{message}': {e}")
            return

        # Carry the caller's correlation id into the worker thread
        correlation_id = TracingContext.get_correlation_id()
        if correlation_id:
            event.metadata.setdefault("correlation_id", correlation_id)

        if not self._pending.acquire(blocking=False):
            logger.warning(f"Log submission backlog full, dropping event '{message}'")
            return
        try:
            future = self._executor.submit(self.record_event, event)
        except RuntimeError as e:
            self._pending.release()
            logger.error(f"Log submission pool unavailable, dropping event: {e}")
            return
        future.add_done_callback(self._finish_submit)

    def _finish_submit(self, future: Future) -> None:
        self._pending.release()
        exc = future.exception()
        if exc is not None:
            logger.error(f"Failed to record log event: {exc}")

    def record(
        self,
        level: SeverityLevel | str,
        category: str,
        message: str,
        operation_class: Optional[str] = None,
        duration_ms: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
        environment: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Optional[int]:
        """Synchronous pipeline. Returns the new entry id, or None when dropped."""
        return self.record_event(
            CandidateEvent(
                level=enum_value(level),
                category=enum_value(category),
                operation_class=enum_value(operation_class) if operation_class else None,
                duration_ms=duration_ms,
                message=message,
                metadata=dict(metadata or {}),
                environment=environment,
                tags=list(tags or []),
            )
        )

    def record_event(self, event: CandidateEvent) -> Optional[int]:
        """
        Run classify -> admit -> append for one candidate.

        Raises:
            InvalidEnvironment: the environment has no retention policy.
            StoreUnavailable: persistence failed.
        """
        environment = (event.environment or self.default_environment).lower()
        thresholds = get_performance_thresholds()

        level = classify(event.operation_class, event.duration_ms, event.level, thresholds)
        slow = is_slow(event.operation_class, event.duration_ms, thresholds)
        if level != event.level:
            logger.debug(
                f"Escalated '{event.message}' from {event.level.value} to {level.value} "
                f"({event.operation_class} took {event.duration_ms}ms)"
            )

        if not should_admit(environment, level, event.category):
            return None

        metadata = dict(event.metadata)
        metadata["system_info"] = get_system_info()
        metadata["tags"] = event.tags

        entry_id = self.store.append(
            level=level,
            category=event.category,
            message=event.message,
            environment=environment,
            operation_class=event.operation_class,
            duration_ms=event.duration_ms,
            metadata=metadata,
            slow_operation=slow,
        )

        if level == SeverityLevel.CRITICAL:
            logger.warning(f"CRITICAL event #{entry_id} recorded: {event.message}")

        return entry_id

    def submit_audit(
        self,
        action: str,
        resource: str,
        resource_id: Optional[str] = None,
        before: Optional[Mapping[str, Any]] = None,
        after: Optional[Mapping[str, Any]] = None,
        actor: Optional[str] = None,
        reason: str = "",
        level: SeverityLevel | str = SeverityLevel.INFO,
        environment: Optional[str] = None,
    ) -> None:
        """Submit a critical_operation event carrying a field-level diff."""
        changes = describe_changes(before, after)
        self.submit(
            level=level,
            category=EventCategory.CRITICAL_OPERATION,
            message=f"Audit: {action} on {resource} - {changes['summary'] or reason}",
            metadata={
                "audit": {
                    "operation": action.upper(),
                    "resource": resource,
                    "resource_id": resource_id,
                    "actor": actor,
                    "reason": reason,
                },
                "changes": {"before": before, "after": after, **changes},
            },
            environment=environment,
            tags=["audit", resource, action],
        )

    # Queries

    def query(
        self,
        level_min: Optional[SeverityLevel | str] = None,
        category: Optional[str] = None,
        start_date=None,
        end_date=None,
        operation_class: Optional[str] = None,
    ) -> LogQuery:
        return self.store.query(
            level_min=level_min,
            category=category,
            start_date=start_date,
            end_date=end_date,
            operation_class=operation_class,
        )

    def get_stats(self, days: int = 7) -> List[Dict[str, Any]]:
        now = utc_now()
        return self.store.stats_by_level_and_category(now - timedelta(days=days), now)

    def get_performance_metrics(self, hours: int = 24) -> List[Dict[str, Any]]:
        return self.store.performance_by_operation_class(utc_now() - timedelta(hours=hours))

    def get_recent_errors(self, limit: int = 50) -> List[LogEntry]:
        return self.store.query(level_min=SeverityLevel.ERROR).page(limit=limit)

    def get_critical_alerts(self, days: int = 7) -> List[LogEntry]:
        query = self.store.query(
            level_min=SeverityLevel.CRITICAL,
            start_date=utc_now() - timedelta(days=days),
        )
        return list(query)

    def get_audit_summary(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        actor: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Audit activity per actor, resource and operation (default: last 7 days)."""
        end_date = end_date or utc_now()
        start_date = start_date or end_date - timedelta(days=7)
        return self.store.audit_summary(start_date, end_date, actor=actor)

    # Configuration accessors

    @staticmethod
    def get_retention_policy() -> Dict[str, Dict[str, int]]:
        return get_retention_policy().to_dict()

    @staticmethod
    def get_performance_thresholds() -> Dict[str, float]:
        return get_performance_thresholds().to_dict()

    def close(self, wait: bool = True) -> None:
        """Drain pending submissions and stop the pool."""
        self._executor.shutdown(wait=wait)


_service: Optional[LogGovernanceService] = None


def get_governance_service() -> LogGovernanceService:
    """Process-wide service bound to the configured database."""
    global _service
    if _service is None:
        from log_governance.database.mongo import get_database

        _service = LogGovernanceService(EventStore(get_database()))
    return _service


def shutdown_governance_service(wait: bool = True) -> None:
    """Drain and discard the process-wide service."""
    global _service
    if _service is not None:
        _service.close(wait=wait)
        _service = None


def submit(
    level: SeverityLevel | str,
    category: str,
    message: str,
    operation_class: Optional[str] = None,
    duration_ms: Optional[float] = None,
    metadata: Optional[Dict[str, Any]] = None,
    environment: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> None:
    """Module-level fire-and-forget entry point for collaborators."""
    try:
        service = get_governance_service()
    except PyMongoError as e:
        logger.error(f"Log governance unavailable, dropping event: {e}")
        return
    service.submit(
        level=level,
        category=category,
        message=message,
        operation_class=operation_class,
        duration_ms=duration_ms,
        metadata=metadata,
        environment=environment,
        tags=tags,
    )
