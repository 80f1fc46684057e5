"""
Performance Middleware - times /api requests and submits them as `api` events.

Slow requests are escalated by the classifier; 5xx responses are submitted at
error level. Submission is fire-and-forget so the response is never delayed by
persistence.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from log_governance.core.tracing import TracingContext
from log_governance.entities.enums import EventCategory, OperationClass, SeverityLevel

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class PerformanceMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, submit: Optional[Callable[..., None]] = None, path_prefix: str = "/api"):
        super().__init__(app)
        self._submit = submit
        self.path_prefix = path_prefix

    def _get_submit(self) -> Callable[..., None]:
        if self._submit is None:
            from log_governance.services.governance_service import submit

            self._submit = submit
        return self._submit

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        TracingContext.set(correlation_id=correlation_id)

        started = time.perf_counter()
        # A request that raises is reported as a 500
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 3)
            level = SeverityLevel.ERROR if status_code >= 500 else SeverityLevel.INFO
            try:
                self._get_submit()(
                    level=level,
                    category=EventCategory.PERFORMANCE.value,
                    message=f"{request.method} {request.url.path}: {duration_ms}ms",
                    operation_class=OperationClass.API.value,
                    duration_ms=duration_ms,
                    metadata={
                        "request": {
                            "method": request.method,
                            "path": request.url.path,
                            "status_code": status_code,
                        }
                    },
                )
            finally:
                TracingContext.clear()
