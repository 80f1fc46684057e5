"""
Purge Scheduler - one purge cycle over expired log entries.

A cycle is guarded by a non-reentrant, non-blocking execution guard: if the
previous cycle still holds it the new tick is skipped rather than queued, and
the next scheduled tick picks up whatever was missed. Deletion runs in batches
under a time budget; when the budget is spent the cycle logs a warning and
yields with status "partial".
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Protocol

import redis

from log_governance.config import settings
from log_governance.core.exceptions import StoreUnavailable
from log_governance.repositories.event_store import EventStore
from log_governance.utils.datetime import utc_now

logger = logging.getLogger(__name__)

PURGE_LOCK_KEY = "log_governance:purge_lock"


class ExecutionGuard(Protocol):
    def acquire(self) -> bool:
        ...

    def release(self) -> None:
        ...


class LocalExecutionGuard:
    """In-process guard backed by a non-blocking threading.Lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        if self._lock.locked():
            self._lock.release()


class RedisExecutionGuard:
    """
    Cross-process guard backed by a Redis lock.

    The lock expires after `ttl_seconds` so a crashed worker cannot block
    purging forever.
    """

    def __init__(
        self,
        client: redis.Redis,
        key: str = PURGE_LOCK_KEY,
        ttl_seconds: Optional[int] = None,
    ):
        self._lock = client.lock(
            key,
            timeout=ttl_seconds or settings.PURGE_LOCK_TTL_SECONDS,
            blocking=False,
        )
        self._owned = False

    def acquire(self) -> bool:
        self._owned = bool(self._lock.acquire(blocking=False, token=uuid.uuid4().hex))
        return self._owned

    def release(self) -> None:
        if not self._owned:
            return
        try:
            self._lock.release()
        except redis.exceptions.LockError:
            logger.warning("Purge lock expired before the cycle finished")
        finally:
            self._owned = False


class PurgeScheduler:
    """Runs purge cycles against an event store."""

    def __init__(
        self,
        store: EventStore,
        guard: Optional[ExecutionGuard] = None,
        batch_size: Optional[int] = None,
        time_budget_seconds: Optional[float] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.guard = guard or LocalExecutionGuard()
        self.batch_size = batch_size or settings.PURGE_BATCH_SIZE
        self.time_budget_seconds = (
            time_budget_seconds
            if time_budget_seconds is not None
            else settings.PURGE_TIME_BUDGET_SECONDS
        )
        self._monotonic = monotonic

    def run_cycle(self, as_of=None) -> Dict[str, Any]:
        """Delete entries expired as of `as_of` (default: now)."""
        as_of = as_of or utc_now()
        result: Dict[str, Any] = {
            "status": "success",
            "deleted_count": 0,
            "batches": 0,
            "as_of": as_of.isoformat(),
        }

        if not self.guard.acquire():
            logger.info("Previous purge cycle still running; skipping this tick")
            result["status"] = "skipped"
            return result

        started = self._monotonic()
        try:
            while True:
                deleted = self.store.delete_expired_batch(as_of, self.batch_size)
                result["batches"] += 1
                result["deleted_count"] += deleted
                if deleted < self.batch_size:
                    break
                if self._monotonic() - started >= self.time_budget_seconds:
                    logger.warning(
                        f"Purge cycle exhausted its {self.time_budget_seconds}s budget after "
                        f"{result['deleted_count']} deletions; remaining entries wait for the next tick"
                    )
                    result["status"] = "partial"
                    break
        except StoreUnavailable as e:
            logger.error(f"Purge cycle failed, will retry on next tick: {e}")
            result["status"] = "failed"
            result["error"] = str(e)
        finally:
            self.guard.release()

        result["elapsed_seconds"] = round(self._monotonic() - started, 3)
        logger.info(
            f"Purge cycle {result['status']}: deleted {result['deleted_count']} "
            f"entries in {result['batches']} batch(es)"
        )
        return result
