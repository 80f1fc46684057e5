"""
Policy Registry - process-wide holder of the active policy snapshots.

Readers grab the current snapshot reference without locking; writers validate a
complete replacement table first and then swap the reference, so a reader never
sees a partially-updated table. A rejected table leaves the previous one active.
"""

import logging
import threading
from typing import Any, Mapping, Optional

from log_governance.core.exceptions import InvariantViolation
from log_governance.services.performance_thresholds import (
    DEFAULT_PERFORMANCE_THRESHOLDS,
    PerformanceThresholdTable,
    load_thresholds_file,
)
from log_governance.services.retention_policy import (
    DEFAULT_RETENTION_POLICY,
    RetentionPolicyTable,
    load_retention_policy_file,
)

logger = logging.getLogger(__name__)


class PolicyRegistry:
    """Copy-on-write holder for the retention and threshold tables."""

    def __init__(
        self,
        retention: Optional[RetentionPolicyTable] = None,
        thresholds: Optional[PerformanceThresholdTable] = None,
    ):
        self._retention = retention or DEFAULT_RETENTION_POLICY
        self._thresholds = thresholds or DEFAULT_PERFORMANCE_THRESHOLDS
        self._write_lock = threading.Lock()

    @property
    def retention(self) -> RetentionPolicyTable:
        return self._retention

    @property
    def thresholds(self) -> PerformanceThresholdTable:
        return self._thresholds

    def replace_retention_policy(
        self, table: RetentionPolicyTable | Mapping[str, Mapping[str, Any]]
    ) -> RetentionPolicyTable:
        """
        Activate a new retention table as a unit.

        Raises:
            InvariantViolation: the table is malformed; the previous table stays active.
        """
        try:
            if not isinstance(table, RetentionPolicyTable):
                table = RetentionPolicyTable.from_mapping(table)
        except InvariantViolation as e:
            logger.error(
                f"Rejected retention policy, keeping previous table: {e.message} {e.violations}"
            )
            raise

        with self._write_lock:
            self._retention = table
        logger.info(f"Retention policy activated for environments {table.environments}")
        return table

    def replace_performance_thresholds(
        self, table: PerformanceThresholdTable | Mapping[str, Any]
    ) -> PerformanceThresholdTable:
        """
        Activate a new threshold table as a unit.

        Raises:
            InvariantViolation: the table is malformed; the previous table stays active.
        """
        try:
            if not isinstance(table, PerformanceThresholdTable):
                table = PerformanceThresholdTable.from_mapping(table)
        except InvariantViolation as e:
            logger.error(
                f"Rejected performance thresholds, keeping previous table: {e.message} {e.violations}"
            )
            raise

        with self._write_lock:
            self._thresholds = table
        logger.info(f"Performance thresholds activated: {table.to_dict()}")
        return table

    def load_from_settings(self, settings) -> None:
        """Apply YAML overrides named in settings, if any."""
        if settings.RETENTION_POLICY_FILE:
            self.replace_retention_policy(
                load_retention_policy_file(settings.RETENTION_POLICY_FILE)
            )
        if settings.PERFORMANCE_THRESHOLDS_FILE:
            self.replace_performance_thresholds(
                load_thresholds_file(settings.PERFORMANCE_THRESHOLDS_FILE)
            )


policy_registry = PolicyRegistry()


def get_retention_policy() -> RetentionPolicyTable:
    """Current retention table (read-only snapshot)."""
    return policy_registry.retention


def get_performance_thresholds() -> PerformanceThresholdTable:
    """Current performance threshold table (read-only snapshot)."""
    return policy_registry.thresholds
