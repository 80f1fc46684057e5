"""Read-only governance settings for operational tooling."""
from fastapi import APIRouter

from log_governance.dtos.logs import (
    PerformanceThresholdsResponse,
    RetentionPolicyResponse,
)
from log_governance.services.policy_registry import (
    get_performance_thresholds,
    get_retention_policy,
)

router = APIRouter(prefix="/governance", tags=["Governance"])


@router.get("/retention-policy", response_model=RetentionPolicyResponse)
def read_retention_policy():
    return {"retention_days": get_retention_policy().to_dict()}


@router.get("/performance-thresholds", response_model=PerformanceThresholdsResponse)
def read_performance_thresholds():
    return {"thresholds_ms": get_performance_thresholds().to_dict()}
