"""
Performance Tracker - measure a block of work and submit it as a governed event.

    with PerformanceTracker("database", "load customer list"):
        ...

The classifier decides whether the measured duration escalates the event.
"""

import functools
import logging
import time
from typing import Any, Callable, Dict, Optional

from log_governance.entities.enums import EventCategory, SeverityLevel

logger = logging.getLogger(__name__)


class PerformanceTracker:
    """Context manager that times a block and submits the measurement on exit."""

    def __init__(
        self,
        operation_class: str,
        message: str,
        level: SeverityLevel | str = SeverityLevel.INFO,
        category: str = EventCategory.PERFORMANCE.value,
        metadata: Optional[Dict[str, Any]] = None,
        submit: Optional[Callable[..., None]] = None,
    ):
        self.operation_class = operation_class
        self.message = message
        self.level = level
        self.category = category
        self.metadata = dict(metadata or {})
        self._submit = submit
        self._started: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> "PerformanceTracker":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.duration_ms = round((time.perf_counter() - self._started) * 1000, 3)
        metadata = dict(self.metadata)
        level = self.level
        if exc is not None:
            metadata["error"] = {"type": exc_type.__name__, "message": str(exc)}
            level = SeverityLevel.ERROR

        submit = self._submit
        if submit is None:
            from log_governance.services.governance_service import submit

        submit(
            level=level,
            category=self.category,
            message=f"{self.message}: {self.duration_ms}ms",
            operation_class=self.operation_class,
            duration_ms=self.duration_ms,
            metadata=metadata,
        )
        # Never swallow the tracked block's exception
        return False


def track_performance(operation_class: str, message: Optional[str] = None, **tracker_kwargs):
    """Decorator form of PerformanceTracker."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with PerformanceTracker(
                operation_class, message or func.__qualname__, **tracker_kwargs
            ):
                return func(*args, **kwargs)

        return wrapper

    return decorator
