"""Celery application and beat schedule."""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from log_governance.config import settings
from log_governance.core.logging import setup_logging

celery_app = Celery(
    "log_governance",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["log_governance.tasks.maintenance"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_default_queue="default",
    worker_hijack_root_logger=False,
    beat_schedule={
        "purge-expired-logs": {
            "task": "log_governance.tasks.maintenance.purge_expired_logs",
            "schedule": float(settings.PURGE_INTERVAL_SECONDS),
            "options": {"queue": "maintenance"},
        },
    },
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    setup_logging()

