"""Admission Filter - decides whether a candidate event is persisted."""

from log_governance.entities.enums import (
    ALWAYS_ADMIT_CATEGORIES,
    DeploymentEnvironment,
    SeverityLevel,
    enum_value,
)


def should_admit(environment: str, level: SeverityLevel | str, category: str) -> bool:
    """
    Admission rules, first match wins:

    1. outside production everything is kept;
    2. security, system_action and critical_operation are always kept;
    3. warning and above are kept;
    4. anything else (routine info/debug traffic in production) is dropped.

    Pure function of its inputs.
    """
    if enum_value(environment).lower() != DeploymentEnvironment.PRODUCTION.value:
        return True

    if enum_value(category) in ALWAYS_ADMIT_CATEGORIES:
        return True

    return SeverityLevel(enum_value(level)) >= SeverityLevel.WARNING
