"""Database entity models - represents the actual structure stored in MongoDB"""

from .base import BaseEntity
from .enums import (
    ALWAYS_ADMIT_CATEGORIES,
    DeploymentEnvironment,
    EventCategory,
    OperationClass,
    Priority,
    SeverityLevel,
)
from .log_entry import CandidateEvent, LogEntry

__all__ = [
    "BaseEntity",
    "ALWAYS_ADMIT_CATEGORIES",
    "DeploymentEnvironment",
    "EventCategory",
    "OperationClass",
    "Priority",
    "SeverityLevel",
    "CandidateEvent",
    "LogEntry",
]
