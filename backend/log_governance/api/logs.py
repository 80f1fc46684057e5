"""Governed log endpoints for audit and ops dashboards."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from log_governance.api.dependencies import get_service
from log_governance.dtos.logs import (
    AuditSummaryRow,
    LevelCategoryStat,
    LogEntryResponse,
    LogListResponse,
    OperationClassMetrics,
    PurgeResultResponse,
    SubmitEventRequest,
    SubmitEventResponse,
)
from log_governance.entities.enums import SeverityLevel
from log_governance.services.governance_service import LogGovernanceService
from log_governance.services.purge_service import LocalExecutionGuard, PurgeScheduler

router = APIRouter(prefix="/logs", tags=["Logs"])

# Manual purges from this process never overlap each other
_manual_purge_guard = LocalExecutionGuard()


@router.get("/", response_model=LogListResponse)
def list_logs(
    level_min: Optional[SeverityLevel] = Query(None),
    category: Optional[str] = Query(None),
    operation_class: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    service: LogGovernanceService = Depends(get_service),
):
    """List persisted entries, newest first."""
    query = service.query(
        level_min=level_min,
        category=category,
        start_date=start_date,
        end_date=end_date,
        operation_class=operation_class,
    )
    logs = query.page(skip=skip, limit=limit)
    return {
        "logs": [entry.model_dump() for entry in logs],
        "pagination": {"total": query.count(), "skip": skip, "limit": limit},
    }


@router.post(
    "/events",
    response_model=SubmitEventResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def submit_event(
    request: SubmitEventRequest,
    service: LogGovernanceService = Depends(get_service),
):
    """Accept a candidate event. The admission decision is not disclosed."""
    service.submit(
        level=request.level,
        category=request.category,
        message=request.message,
        operation_class=request.operation_class,
        duration_ms=request.duration_ms,
        metadata=request.metadata,
        environment=request.environment,
        tags=request.tags,
    )
    return {"accepted": True}


@router.get("/stats", response_model=List[LevelCategoryStat])
def get_stats(
    days: int = Query(7, ge=1, le=365),
    service: LogGovernanceService = Depends(get_service),
):
    return service.get_stats(days=days)


@router.get("/performance", response_model=List[OperationClassMetrics])
def get_performance_metrics(
    hours: int = Query(24, ge=1, le=24 * 30),
    service: LogGovernanceService = Depends(get_service),
):
    return service.get_performance_metrics(hours=hours)


@router.get("/errors", response_model=List[LogEntryResponse])
def get_recent_errors(
    limit: int = Query(50, ge=1, le=200),
    service: LogGovernanceService = Depends(get_service),
):
    return [entry.model_dump() for entry in service.get_recent_errors(limit=limit)]


@router.get("/critical", response_model=List[LogEntryResponse])
def get_critical_alerts(
    days: int = Query(7, ge=1, le=90),
    service: LogGovernanceService = Depends(get_service),
):
    return [entry.model_dump() for entry in service.get_critical_alerts(days=days)]


@router.get("/audit-summary", response_model=List[AuditSummaryRow])
def get_audit_summary(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    actor: Optional[str] = Query(None),
    service: LogGovernanceService = Depends(get_service),
):
    """Who did what, grouped by actor, resource and operation."""
    return service.get_audit_summary(start_date=start_date, end_date=end_date, actor=actor)


@router.post("/purge", response_model=PurgeResultResponse)
def purge_expired(service: LogGovernanceService = Depends(get_service)):
    """Run one purge cycle now (manual cleanup)."""
    return PurgeScheduler(service.store, guard=_manual_purge_guard).run_cycle()
