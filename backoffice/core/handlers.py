"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for the application exception
hierarchy, translating each family into its HTTP status code. Response
bodies carry the human-readable `detail` and the machine-readable `code`.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from backoffice.core.exceptions import (
    BackofficeError,
    ConflictError,
    DatabaseError,
    DeactivationRestrictedError,
    EntityNotFoundError,
    ThrottleLimitExceededError,
    ThrottlerUnavailableError,
    ValidationError,
)

__all__ = [
    "validation_error_handler",
    "entity_not_found_error_handler",
    "conflict_error_handler",
    "throttle_limit_exceeded_error_handler",
    "throttler_unavailable_error_handler",
    "database_error_handler",
    "backoffice_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _error_body(exc: BackofficeError) -> dict:
    return {"detail": exc.message, "code": exc.code}


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handles `ValidationError`, returning a `422 Unprocessable Entity`."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(exc),
    )


async def entity_not_found_error_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    """Handles `EntityNotFoundError`, returning a `404 Not Found`."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_body(exc),
    )


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handles `ConflictError`, returning a `409 Conflict`.

    Deactivation restrictions also list the violated rules and the relations
    that hold the blocking records.
    """
    content = _error_body(exc)
    if isinstance(exc, DeactivationRestrictedError):
        content["violations"] = exc.violations
        content["blocked_by"] = exc.blocked_by
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=content)


async def throttle_limit_exceeded_error_handler(
    request: Request, exc: ThrottleLimitExceededError
) -> JSONResponse:
    """Handles `ThrottleLimitExceededError`, returning a `429 Too Many Requests`."""
    logger.warning(
        "Throttle limit exceeded",
        client_ip=request.client.host if request.client else None,
        path=request.url.path,
    )
    headers = {}
    if exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(exc),
        headers=headers,
    )


async def throttler_unavailable_error_handler(
    request: Request, exc: ThrottlerUnavailableError
) -> JSONResponse:
    """Handles `ThrottlerUnavailableError`, returning a `503 Service Unavailable`."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body(exc),
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handles `DatabaseError`, returning a `500 Internal Server Error`.

    The driver message never reaches the client.
    """
    logger.error("Database error", error=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal database error", "code": exc.code},
    )


async def backoffice_error_handler(request: Request, exc: BackofficeError) -> JSONResponse:
    """Fallback for any other `BackofficeError`, returning a `500`."""
    logger.error("Unhandled application error", error=exc.message, code=exc.code)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Starlette resolves handlers by walking the exception's MRO, so subclass
    handlers take precedence over the base-class fallback.
    """
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(EntityNotFoundError, entity_not_found_error_handler)
    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(ThrottleLimitExceededError, throttle_limit_exceeded_error_handler)
    app.add_exception_handler(ThrottlerUnavailableError, throttler_unavailable_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(BackofficeError, backoffice_error_handler)
