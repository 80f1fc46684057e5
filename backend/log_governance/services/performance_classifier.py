"""Performance Classifier - escalates slow operations to at least warning."""

import logging
from typing import Optional

from log_governance.entities.enums import SeverityLevel, enum_value
from log_governance.services.performance_thresholds import PerformanceThresholdTable
from log_governance.services.policy_registry import get_performance_thresholds

logger = logging.getLogger(__name__)


def is_slow(
    operation_class: Optional[str],
    duration_ms: Optional[float],
    thresholds: Optional[PerformanceThresholdTable] = None,
) -> bool:
    """True when the duration exceeds the threshold of a known operation class."""
    if operation_class is None or duration_ms is None:
        return False
    table = thresholds or get_performance_thresholds()
    limit = table.get(operation_class)
    if limit is None:
        logger.debug(f"No threshold for operation class '{operation_class}', skipping")
        return False
    return duration_ms > limit


def classify(
    operation_class: Optional[str],
    duration_ms: Optional[float],
    base_level: SeverityLevel | str,
    thresholds: Optional[PerformanceThresholdTable] = None,
) -> SeverityLevel:
    """
    Effective level for an event.

    A duration above the class threshold raises the level to at least warning;
    a level that is already higher is kept. Missing or unknown operation classes
    pass the base level through unchanged.
    """
    level = SeverityLevel(enum_value(base_level))
    if is_slow(operation_class, duration_ms, thresholds):
        return max(level, SeverityLevel.WARNING)
    return level
