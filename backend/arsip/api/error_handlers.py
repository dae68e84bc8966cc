"""Error Handlers — global exception handlers and result-to-HTTP mapping.

Invariants:
    - ArsipError → structured JSON with error code, message, severity
    - RequestValidationError → field-level error details
    - Exception (catch-all) → never leaks internal details
    - Workflow error results map to the same envelope and status as the raised form

Design Decisions:
    - Three-layer handler: domain (ArsipError), validation (Pydantic), catch-all (Exception)
    - Services return result dicts instead of raising; result_response is the one
      place those become HTTP statuses (ADR: uniform result shape)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from arsip.core.errors import ArsipError, ErrorSeverity

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "ACCESS_DENIED": status.HTTP_403_FORBIDDEN,
    "RESOURCE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "APPROVAL_PENDING": status.HTTP_409_CONFLICT,
    "APPROVAL_REJECTED": status.HTTP_409_CONFLICT,
    "CONCURRENCY_CONFLICT": status.HTTP_409_CONFLICT,
    "SELECTION_STALE": status.HTTP_409_CONFLICT,
    "MEMO_NUMBER_TAKEN": status.HTTP_409_CONFLICT,
    "MIGRATION_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "DATABASE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_arsip_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def result_response(result: dict):
    """Pass ok results through; wrap error results in the error envelope."""
    if result.get("status") != "error":
        return result
    code = result.get("error_code", "")
    error = {k: v for k, v in result.items() if k not in ("status", "error_code")}
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST),
        content={"error": {"code": code, **error}},
    )


def _register_arsip_error_handler(app: FastAPI) -> None:
    """Register archive domain/infrastructure error handler."""

    @app.exception_handler(ArsipError)
    async def arsip_error_handler(request: Request, exc: ArsipError):
        """Handle all archive domain/infrastructure errors."""
        log = logger.warning if exc.recoverable else logger.error
        log(
            f"ArsipError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
