"""
Retention Policy Table - per-environment, per-level retention windows (days).

Tables are immutable snapshots. A new table is validated as a whole before it
can be activated: every level must be present, every window must be a positive
integer and, within an environment, windows never shrink as severity grows.
A row without a `debug` window uses its `info` window.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

import yaml

from log_governance.core.exceptions import ConfigurationError, InvariantViolation
from log_governance.entities.enums import SeverityLevel, enum_value

logger = logging.getLogger(__name__)


DEFAULT_RETENTION_DAYS: Dict[str, Dict[str, int]] = {
    "production": {
        "info": 7,
        "warning": 30,
        "error": 90,
        "critical": 180,
    },
    "development": {
        "info": 3,
        "warning": 7,
        "error": 30,
        "critical": 90,
    },
}


@dataclass(frozen=True)
class RetentionPolicyTable:
    """Immutable Environment x Level -> retention_days mapping."""

    windows: Mapping[str, Mapping[str, int]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> "RetentionPolicyTable":
        """Build and validate a table from a plain nested mapping."""
        if not isinstance(raw, Mapping):
            raise InvariantViolation(
                "Retention policy must be a mapping of environment -> level -> days",
                violations=[f"got {type(raw).__name__}"],
            )
        raw = _fill_debug_windows(raw)
        violations = validate_retention_windows(raw)
        if violations:
            raise InvariantViolation(
                f"Retention policy rejected ({len(violations)} violation(s))",
                violations=violations,
            )
        frozen = {
            str(env).lower(): MappingProxyType(
                {str(level).lower(): int(days) for level, days in levels.items()}
            )
            for env, levels in raw.items()
        }
        return cls(windows=MappingProxyType(frozen))

    @property
    def environments(self) -> List[str]:
        return sorted(self.windows.keys())

    def retention_days(self, environment: str, level: SeverityLevel | str) -> int:
        """
        Look up the retention window for an environment and level.

        Raises:
            ConfigurationError: unknown environment or level. Never defaults.
        """
        env_key = enum_value(environment).lower()
        levels = self.windows.get(env_key)
        if levels is None:
            raise ConfigurationError(
                f"Unknown environment '{environment}' in retention policy",
                context={"environment": env_key, "known": self.environments},
            )
        level_key = enum_value(level).lower()
        if level_key not in levels:
            raise ConfigurationError(
                f"Unknown level '{level}' in retention policy for '{env_key}'",
                context={"environment": env_key, "level": level_key},
            )
        return levels[level_key]

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {env: dict(levels) for env, levels in self.windows.items()}


def _fill_debug_windows(raw: Mapping[str, Any]) -> Dict[str, Any]:
    filled: Dict[str, Any] = {}
    for env, levels in raw.items():
        if isinstance(levels, Mapping):
            levels = {str(k).lower(): v for k, v in levels.items()}
            if SeverityLevel.DEBUG.value not in levels and SeverityLevel.INFO.value in levels:
                levels[SeverityLevel.DEBUG.value] = levels[SeverityLevel.INFO.value]
        filled[env] = levels
    return filled


def validate_retention_windows(raw: Mapping[str, Mapping[str, Any]]) -> List[str]:
    """Return every invariant violation found in a raw retention mapping."""
    violations: List[str] = []
    if not raw:
        violations.append("policy defines no environments")

    for env, levels in raw.items():
        if not isinstance(levels, Mapping):
            violations.append(f"{env}: expected a mapping of level -> days")
            continue

        normalized = {str(k).lower(): v for k, v in levels.items()}
        unknown = set(normalized) - {level.value for level in SeverityLevel}
        for name in sorted(unknown):
            violations.append(f"{env}: unknown level '{name}'")

        previous_days = None
        previous_level = None
        for level in SeverityLevel:
            if level.value not in normalized:
                violations.append(f"{env}: missing level '{level.value}'")
                continue
            days = normalized[level.value]
            if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
                violations.append(f"{env}.{level.value}: retention must be a positive integer, got {days!r}")
                continue
            if previous_days is not None and days < previous_days:
                violations.append(
                    f"{env}: {level.value} ({days}d) is shorter than {previous_level} ({previous_days}d)"
                )
            previous_days = days
            previous_level = level.value

    return violations


def load_retention_policy_file(path: str | Path) -> RetentionPolicyTable:
    """Load a retention table from YAML (``{environment: {level: days}}``)."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Cannot read retention policy file {path}: {e}",
            context={"path": str(path)},
        ) from e

    # Allow the table to be nested under a top-level key
    if isinstance(raw, Mapping) and "retention" in raw:
        raw = raw["retention"]

    return RetentionPolicyTable.from_mapping(raw or {})


DEFAULT_RETENTION_POLICY = RetentionPolicyTable.from_mapping(DEFAULT_RETENTION_DAYS)
