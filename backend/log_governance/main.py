"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from log_governance.api import governance, health, logs
from log_governance.config import settings
from log_governance.core.logging import setup_logging
from log_governance.middleware.error_codes import register_error_handlers
from log_governance.middleware.performance import PerformanceMiddleware
from log_governance.services.governance_service import (
    get_governance_service,
    shutdown_governance_service,
)
from log_governance.services.policy_registry import policy_registry
from log_governance.utils.governance_log_handler import setup_governance_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Policy overrides are loaded once; a malformed file aborts startup
    policy_registry.load_from_settings(settings)
    if settings.CAPTURE_APPLICATION_LOGS:
        setup_governance_logging()
    # Connect and build indexes before the first request reaches the middleware
    get_governance_service()
    logger.info(f"{settings.APP_NAME} started in '{settings.ENVIRONMENT}' environment")
    yield
    shutdown_governance_service()


app = FastAPI(
    title="Log Governance API",
    description="Admission, retention and performance escalation for operational events",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

app.add_middleware(PerformanceMiddleware)
register_error_handlers(app)

app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(logs.router, prefix="/api", tags=["Logs"])
app.include_router(governance.router, prefix="/api", tags=["Governance"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Log Governance API",
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("log_governance.main:app", host="0.0.0.0", port=8000, reload=True)
