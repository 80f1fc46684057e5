"""
LogEntry Entity - Governed operational events stored in MongoDB.

Entries are created by the event store at admission time and are immutable
afterwards; the only other write they ever see is deletion by the purge cycle.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .base import BaseEntity
from .enums import SeverityLevel


class LogEntry(BaseEntity):
    """Persisted operational event."""

    id: Optional[int] = Field(
        default=None,
        alias="_id",
        description="Monotonically increasing event id",
    )

    timestamp: datetime = Field(..., description="When the entry was admitted (naive UTC)")

    level: SeverityLevel = Field(..., description="Effective level after classification")

    level_rank: int = Field(
        default=0,
        description="Numeric rank of the level, used for level_min queries",
    )

    category: str = Field(..., description="Event category tag")

    operation_class: Optional[str] = Field(
        default=None,
        description="Operation class used for latency classification",
    )

    duration_ms: Optional[float] = Field(default=None, description="Measured duration")

    slow_operation: bool = Field(
        default=False,
        description="Whether the duration exceeded the operation class threshold",
    )

    message: str = Field(default="", description="Human readable message")

    metadata: Dict[str, Any] = Field(default_factory=dict)

    environment: str = Field(..., description="Deployment environment at submission")

    priority: str = Field(default="low", description="Operator-facing priority")

    expires_at: datetime = Field(..., description="timestamp + retention window")


class CandidateEvent(BaseModel):
    """An event as submitted by a collaborator, before classification and admission."""

    level: SeverityLevel = SeverityLevel.INFO
    category: str = "user_action"
    operation_class: Optional[str] = None
    duration_ms: Optional[float] = None
    message: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    environment: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
