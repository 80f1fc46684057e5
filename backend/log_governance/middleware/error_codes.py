"""Error codes for standardized API error responses.

Maps HTTP status codes and governance errors to semantic error codes for
consistent client-side handling.
"""

from enum import Enum

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from log_governance.core.exceptions import (
    ConfigurationError,
    GovernanceError,
    InvariantViolation,
    StoreUnavailable,
)


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


STATUS_TO_ERROR_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    404: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION_ERROR,
    500: ErrorCode.INTERNAL_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


def get_error_code(status_code: int) -> ErrorCode:
    """Get ErrorCode from HTTP status code."""
    return STATUS_TO_ERROR_CODE.get(status_code, ErrorCode.INTERNAL_ERROR)


def status_for_error(exc: GovernanceError) -> tuple[int, ErrorCode]:
    if isinstance(exc, StoreUnavailable):
        return 503, ErrorCode.SERVICE_UNAVAILABLE
    if isinstance(exc, InvariantViolation):
        return 422, ErrorCode.INVARIANT_VIOLATION
    if isinstance(exc, ConfigurationError):
        return 422, ErrorCode.CONFIGURATION_ERROR
    return 500, ErrorCode.INTERNAL_ERROR


async def governance_error_handler(request: Request, exc: GovernanceError) -> JSONResponse:
    status_code, code = status_for_error(exc)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code.value,
                "message": exc.message,
                "context": exc.context,
            }
        },
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": get_error_code(exc.status_code).value,
                "message": exc.detail,
            }
        },
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GovernanceError, governance_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
