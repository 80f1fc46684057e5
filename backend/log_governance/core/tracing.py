"""
Tracing Context - Thread-safe context management for correlation ids.

Uses contextvars so API requests and Celery tasks each see their own
correlation id. The JSON log formatter and the governance service read it
to tie log lines and governed events together.

Usage:
    TracingContext.set(correlation_id="abc-123", task_name="purge")
    ctx = TracingContext.get()
    TracingContext.clear()
"""

from contextvars import ContextVar
from typing import Dict

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_task_name: ContextVar[str] = ContextVar("task_name", default="")


class TracingContext:
    """Thread-safe tracing context."""

    @staticmethod
    def set(correlation_id: str = "", task_name: str = "") -> None:
        """Set tracing context for current execution."""
        if correlation_id:
            _correlation_id.set(correlation_id)
        if task_name:
            _task_name.set(task_name)

    @staticmethod
    def get() -> Dict[str, str]:
        """Get current tracing context as dict."""
        return {
            "correlation_id": _correlation_id.get(),
            "task_name": _task_name.get(),
        }

    @staticmethod
    def get_correlation_id() -> str:
        return _correlation_id.get()

    @staticmethod
    def clear() -> None:
        _correlation_id.set("")
        _task_name.set("")
