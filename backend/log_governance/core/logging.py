"""
Structured Logging Configuration.

Supports two modes:
- text: Human-readable format for development
- json: Structured JSON format for production

Set LOG_FORMAT to "json" for production.
"""

import json
import logging
import sys
from typing import Any, Dict


class JSONFormatter(logging.Formatter):
    """Formatter that outputs JSON strings with the current correlation id."""

    def format(self, record: logging.LogRecord) -> str:
        from log_governance.core.tracing import TracingContext

        ctx = TracingContext.get()

        log_record: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
            "correlation_id": ctx.get("correlation_id", ""),
            "task_name": ctx.get("task_name", ""),
        }

        if hasattr(record, "task_id"):
            log_record["task_id"] = record.task_id

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(log_format: str | None = None) -> None:
    """
    Setup structured logging for the application.

    Uses LOG_FORMAT setting to determine format:
    - "json": Structured JSON
    - "text" (default): Human-readable for development
    """
    root_logger = logging.getLogger()

    # Avoid adding multiple handlers
    if root_logger.handlers:
        return

    if log_format is None:
        from log_governance.config import settings

        log_format = settings.LOG_FORMAT

    root_logger.setLevel(logging.INFO)

    handler = logging.StreamHandler(sys.stdout)

    if log_format.lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Set lower level for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.INFO)
