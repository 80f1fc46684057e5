"""Performance Threshold Table - latency ceilings (ms) per operation class."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from log_governance.core.exceptions import ConfigurationError, InvariantViolation
from log_governance.entities.enums import enum_value

logger = logging.getLogger(__name__)


DEFAULT_THRESHOLDS_MS: Dict[str, float] = {
    "database": 100,
    "api": 1000,
    "operation": 500,
}


@dataclass(frozen=True)
class PerformanceThresholdTable:
    """Immutable OperationClass -> max_acceptable_ms mapping."""

    thresholds: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PerformanceThresholdTable":
        if not isinstance(raw, Mapping):
            raise InvariantViolation(
                "Performance thresholds must be a mapping of operation class -> ms",
                violations=[f"got {type(raw).__name__}"],
            )
        violations = validate_thresholds(raw)
        if violations:
            raise InvariantViolation(
                f"Performance thresholds rejected ({len(violations)} violation(s))",
                violations=violations,
            )
        return cls(
            thresholds=MappingProxyType({str(k).lower(): v for k, v in raw.items()})
        )

    def get(self, operation_class: Optional[str]) -> Optional[float]:
        """Threshold for an operation class, or None when absent/unknown."""
        if operation_class is None:
            return None
        return self.thresholds.get(enum_value(operation_class).lower())

    def threshold(self, operation_class: str) -> float:
        """
        Strict lookup.

        Raises:
            ConfigurationError: unknown operation class.
        """
        value = self.get(operation_class)
        if value is None:
            raise ConfigurationError(
                f"Unknown operation class '{operation_class}'",
                context={"operation_class": operation_class, "known": sorted(self.thresholds)},
            )
        return value

    def to_dict(self) -> Dict[str, float]:
        return dict(self.thresholds)


def validate_thresholds(raw: Mapping[str, Any]) -> List[str]:
    violations: List[str] = []
    if not raw:
        violations.append("no operation classes defined")
    for name, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            violations.append(f"{name}: threshold must be a positive number, got {value!r}")
    return violations


def load_thresholds_file(path: str | Path) -> PerformanceThresholdTable:
    """Load thresholds from YAML (``{operation_class: ms}``)."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Cannot read performance thresholds file {path}: {e}",
            context={"path": str(path)},
        ) from e

    if isinstance(raw, Mapping) and "thresholds" in raw:
        raw = raw["thresholds"]

    return PerformanceThresholdTable.from_mapping(raw or {})


DEFAULT_PERFORMANCE_THRESHOLDS = PerformanceThresholdTable.from_mapping(DEFAULT_THRESHOLDS_MS)
