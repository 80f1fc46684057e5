"""
Maintenance Tasks - Scheduled purge of expired log entries.

Runs periodically via Celery Beat (see celery_app.beat_schedule).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

import redis
from celery.exceptions import SoftTimeLimitExceeded

from log_governance.celery_app import celery_app
from log_governance.config import settings
from log_governance.core.tracing import TracingContext
from log_governance.database.mongo import get_database
from log_governance.repositories.event_store import EventStore
from log_governance.services.purge_service import PurgeScheduler, RedisExecutionGuard

logger = logging.getLogger(__name__)


@celery_app.task(
    name="log_governance.tasks.maintenance.purge_expired_logs",
    bind=True,
    queue="maintenance",
    soft_time_limit=int(settings.PURGE_TIME_BUDGET_SECONDS) + 60,
    time_limit=int(settings.PURGE_TIME_BUDGET_SECONDS) + 120,
)
def purge_expired_logs(self) -> Dict[str, Any]:
    """
    Delete log entries whose retention window has passed.

    A tick that finds the previous cycle still running is skipped. Store or
    Redis outages are logged and left for the next tick.

    Returns:
        Dict with status, deleted count and timestamp.
    """
    TracingContext.set(
        correlation_id=self.request.id or "",
        task_name="purge_expired_logs",
    )
    try:
        scheduler = PurgeScheduler(
            EventStore(get_database(), create_indexes=False),
            guard=RedisExecutionGuard(redis.from_url(settings.REDIS_URL)),
        )
        result = scheduler.run_cycle()
    except SoftTimeLimitExceeded:
        logger.warning("Purge task hit its soft time limit; yielding until next tick")
        result = {"status": "partial", "error": "soft time limit exceeded"}
    except redis.exceptions.RedisError as e:
        logger.error(f"Purge guard unavailable, will retry on next tick: {e}")
        result = {"status": "failed", "error": str(e)}
    finally:
        TracingContext.clear()

    result["executed_at"] = datetime.now(timezone.utc).isoformat()
    return result
