"""FastAPI dependencies."""

from log_governance.services.governance_service import (
    LogGovernanceService,
    get_governance_service,
)


def get_service() -> LogGovernanceService:
    return get_governance_service()
