"""Error Handlers — global exception handlers for the book catalog API.

Invariants:
    - BookCatalogError → structured JSON with code, message, severity, status
    - RequestValidationError → 400 with a list of "<field>: <reason>" messages
    - Routing errors (unknown path, wrong method) → same {"error": {...}} envelope
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Layered handlers: domain (BookCatalogError), validation (Pydantic),
      routing (Starlette HTTPException), catch-all (Exception)
    - Validation answers 400, not FastAPI's default 422
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from book_catalog.core.errors import BookCatalogError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_catalog_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_catalog_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(BookCatalogError)
    async def catalog_error_handler(request: Request, exc: BookCatalogError):
        """Handle all book catalog domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"BookCatalogError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "isbn": exc.context.isbn,
            },
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
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=build_validation_error_response(exc.errors()),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register handler for routing/HTTP errors raised by Starlette."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        """Wrap routing 404/405 in the catalog error envelope."""
        logger.warning(
            f"HTTP {exc.status_code} on {request.method} {request.url.path}",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=build_http_error_response(exc.status_code, exc.detail),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": ErrorCategory.INTERNAL.value,
                    "severity": ErrorSeverity.CRITICAL.value,
                    "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
                },
            },
        )


def _field_path(loc) -> str:
    """Dotted field path without the leading request location ("body", "path")."""
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


def build_validation_error_response(errors) -> dict:
    """Build structured validation error response from Pydantic error dicts."""
    details = [
        {
            "field": _field_path(e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": [
                f"{d['field']}: {d['message']}" if d["field"] else d["message"]
                for d in details
            ],
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "status": status.HTTP_400_BAD_REQUEST,
            "details": details,
        },
    }


_HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: ("ROUTE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", ErrorCategory.VALIDATION),
}


def build_http_error_response(status_code: int, detail) -> dict:
    """Build error envelope for a Starlette HTTPException."""
    default_category = (
        ErrorCategory.INTERNAL if status_code >= 500 else ErrorCategory.VALIDATION
    )
    code, category = _HTTP_ERROR_CODES.get(
        status_code, ("HTTP_ERROR", default_category),
    )
    return {
        "error": {
            "code": code,
            "message": str(detail),
            "category": category.value,
            "severity": ErrorSeverity.ERROR.value,
            "status": status_code,
        },
    }
