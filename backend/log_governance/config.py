"""
Application configuration
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Log Governance"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # Deployment environment used when an event does not carry one
    ENVIRONMENT: str = "development"

    # Database (MongoDB)
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "log_governance"

    # Redis / Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Logging
    LOG_FORMAT: str = "text"
    # Forward application WARNING+ records into the governance pipeline
    CAPTURE_APPLICATION_LOGS: bool = True

    # Policy overrides (YAML), loaded once at startup
    RETENTION_POLICY_FILE: Optional[str] = None
    PERFORMANCE_THRESHOLDS_FILE: Optional[str] = None

    # Purge scheduler
    PURGE_INTERVAL_SECONDS: int = 86400
    PURGE_BATCH_SIZE: int = 1000
    PURGE_TIME_BUDGET_SECONDS: float = 300.0
    PURGE_LOCK_TTL_SECONDS: int = 900

    # Fire-and-forget submission pool
    SUBMIT_MAX_WORKERS: int = 4
    # Events waiting for a worker beyond this are dropped
    SUBMIT_MAX_PENDING: int = 10000

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
