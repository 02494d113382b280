"""Error Handlers — global exception handlers for the Task Manager API.

Invariants:
    - TaskManagerError -> its own http_status and to_response() envelope
    - RequestValidationError -> 400 with a field_errors map keyed by location
    - Exception (catch-all) -> 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (TaskManagerError), validation (pydantic), catch-all
    - Kind-to-status mapping lives on the error classes; handlers only serialize and log
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from taskmanager.core.errors import ErrorCategory, ErrorSeverity, TaskManagerError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TaskManagerError)
    async def domain_error_handler(request: Request, exc: TaskManagerError):
        """Handle all Task Manager domain/infrastructure errors."""
        logger.error(
            f"TaskManagerError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": ErrorCategory.INTERNAL.value,
                    "severity": ErrorSeverity.CRITICAL.value,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """One message per field; the first error for a location wins."""
    field_errors: dict[str, str] = {}
    for e in exc.errors():
        key = ".".join(str(loc) for loc in e["loc"])
        field_errors.setdefault(key, e["msg"])
    return {
        "error": {
            "code": "INVALID_ARGUMENT",
            "message": "Invalid request data",
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "field_errors": field_errors,
        },
    }
