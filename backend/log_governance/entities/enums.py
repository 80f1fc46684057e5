"""Shared vocabulary: severity levels, event categories, environments."""

from enum import Enum


class SeverityLevel(str, Enum):
    """Ordered severity of an operational event (debug < ... < critical)."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def __lt__(self, other):
        if isinstance(other, SeverityLevel):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, SeverityLevel):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, SeverityLevel):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, SeverityLevel):
            return self.rank >= other.rank
        return NotImplemented


_LEVEL_RANK = {level: index for index, level in enumerate(SeverityLevel)}


class EventCategory(str, Enum):
    """Semantic category of an event. Stored as a plain string, so new tags are allowed."""

    USER_ACTION = "user_action"
    SYSTEM_ACTION = "system_action"
    SECURITY = "security"
    CRITICAL_OPERATION = "critical_operation"
    PERFORMANCE = "performance"


# Audit/compliance categories exempt from production noise reduction
ALWAYS_ADMIT_CATEGORIES = frozenset(
    {
        EventCategory.SECURITY.value,
        EventCategory.SYSTEM_ACTION.value,
        EventCategory.CRITICAL_OPERATION.value,
    }
)


class DeploymentEnvironment(str, Enum):
    """Known deployment environments. Each one needs its own retention row."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class OperationClass(str, Enum):
    """Coarse bucket used to pick a latency threshold."""

    DATABASE = "database"
    API = "api"
    OPERATION = "operation"


class Priority(str, Enum):
    """Operator-facing priority derived from the effective level."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


def priority_for_level(level: SeverityLevel) -> Priority:
    if level == SeverityLevel.CRITICAL:
        return Priority.URGENT
    if level == SeverityLevel.ERROR:
        return Priority.HIGH
    if level == SeverityLevel.WARNING:
        return Priority.NORMAL
    return Priority.LOW


def enum_value(item) -> str:
    """Return the raw string for an enum member or a plain string."""
    return item.value if isinstance(item, Enum) else str(item)
