"""
Governance Log Handler - routes application log records into the governance pipeline.

Attach it to the root logger so ordinary ``logger.warning(...)`` calls from
application modules become governed events (classified, filtered, retained).
"""

import logging
from typing import Callable, Optional

from log_governance.entities.enums import EventCategory, SeverityLevel

# Records from the engine and its driver are never fed back into it
_INTERNAL_PREFIXES = ("log_governance", "pymongo")

_LEVEL_MAP = {
    logging.DEBUG: SeverityLevel.DEBUG,
    logging.INFO: SeverityLevel.INFO,
    logging.WARNING: SeverityLevel.WARNING,
    logging.ERROR: SeverityLevel.ERROR,
    logging.CRITICAL: SeverityLevel.CRITICAL,
}


def severity_for_record(record: logging.LogRecord) -> SeverityLevel:
    """Map a stdlib level number onto the severity scale (rounding down)."""
    for levelno in sorted(_LEVEL_MAP, reverse=True):
        if record.levelno >= levelno:
            return _LEVEL_MAP[levelno]
    return SeverityLevel.DEBUG


class GovernanceLogHandler(logging.Handler):
    """
    Logging handler that submits records as governed events.

    Records may set ``extra={"category": ..., "operation_class": ...,
    "duration_ms": ...}`` to steer classification.
    """

    def __init__(
        self,
        level: int = logging.WARNING,
        submit: Optional[Callable[..., None]] = None,
    ):
        super().__init__(level)
        self._submit = submit

    def _get_submit(self) -> Callable[..., None]:
        if self._submit is None:
            from log_governance.services.governance_service import submit

            self._submit = submit
        return self._submit

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(_INTERNAL_PREFIXES):
            return
        try:
            details = {
                "logger": record.name,
                "filename": record.filename,
                "lineno": record.lineno,
                "func_name": record.funcName,
            }
            if record.exc_info and record.exc_info[1] is not None:
                details["exception"] = str(record.exc_info[1])

            self._get_submit()(
                level=severity_for_record(record),
                category=getattr(record, "category", EventCategory.SYSTEM_ACTION.value),
                message=self.format(record),
                operation_class=getattr(record, "operation_class", None),
                duration_ms=getattr(record, "duration_ms", None),
                metadata=details,
            )
        except Exception:
            self.handleError(record)


def setup_governance_logging(level: int = logging.WARNING) -> GovernanceLogHandler:
    """Add the governance handler to the root logger."""
    handler = GovernanceLogHandler(level=level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.getLogger().addHandler(handler)
    return handler
