"""
Log DTOs - Data Transfer Objects for log governance endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from log_governance.entities.enums import SeverityLevel


class LogEntryResponse(BaseModel):
    """Persisted log entry."""

    id: int
    timestamp: datetime
    level: str
    category: str
    operation_class: Optional[str] = None
    duration_ms: Optional[float] = None
    slow_operation: bool = False
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    environment: str
    priority: str
    expires_at: datetime


class PaginationInfo(BaseModel):
    total: int
    skip: int
    limit: int


class LogListResponse(BaseModel):
    logs: List[LogEntryResponse]
    pagination: PaginationInfo


class SubmitEventRequest(BaseModel):
    """Candidate event submitted over HTTP."""

    level: SeverityLevel = SeverityLevel.INFO
    category: str = "user_action"
    operation_class: Optional[str] = None
    duration_ms: Optional[float] = Field(default=None, ge=0)
    message: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    environment: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class SubmitEventResponse(BaseModel):
    accepted: bool = True


class LevelCategoryStat(BaseModel):
    level: str
    category: str
    count: int
    avg_duration_ms: Optional[float] = None


class OperationClassMetrics(BaseModel):
    operation_class: str
    avg_duration_ms: Optional[float] = None
    max_duration_ms: Optional[float] = None
    min_duration_ms: Optional[float] = None
    slow_operations: int = 0
    total_operations: int = 0


class AuditSummaryRow(BaseModel):
    """Audit activity for one actor, resource and operation."""

    actor: Optional[str] = None
    resource: Optional[str] = None
    operation: Optional[str] = None
    count: int
    last_action: datetime


class PurgeResultResponse(BaseModel):
    status: str
    deleted_count: int = 0
    batches: int = 0
    as_of: Optional[str] = None
    elapsed_seconds: Optional[float] = None
    error: Optional[str] = None


class RetentionPolicyResponse(BaseModel):
    """Environment -> level -> retention days."""

    retention_days: Dict[str, Dict[str, int]]


class PerformanceThresholdsResponse(BaseModel):
    """Operation class -> max acceptable duration (ms)."""

    thresholds_ms: Dict[str, float]
