"""Error Handlers — global exception handlers for the storefront API.

Invariants:
    - StorefrontError -> its envelope and http_status (public message only)
    - RequestValidationError -> 400 envelope with field-level details
    - Framework HTTP errors (unknown route 404, wrong method 405) -> envelope
    - Exception (catch-all) -> 500, never leaks internal details

Design Decisions:
    - Extracted from main.py; each layer registered by its own function
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.errors import ErrorCategory, StorefrontError, error_envelope

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_storefront_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_storefront_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"StorefrontError: {exc.message}",
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
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register handler for routing errors raised by the framework."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        category = (
            ErrorCategory.RESOURCE_NOT_FOUND
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else ErrorCategory.VALIDATION
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(
                exc.status_code, "HTTP_ERROR", str(exc.detail), category,
            ),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            extra={"path": request.url.path},
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope(
                500, "INTERNAL_ERROR", "An unexpected error occurred",
                ErrorCategory.INTERNAL,
            ),
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    body = error_envelope(
        400, "VALIDATION_ERROR", "Missing required fields or fields are invalid",
        ErrorCategory.VALIDATION,
    )
    body["error"]["details"] = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return body
