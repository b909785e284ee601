"""Global exception handlers for FastAPI.

Provides consistent JSON error response format across all endpoints.
Internal server errors (500s) are logged but not exposed to clients.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.exceptions import UnlingoException
from unlingo.db.pagination import InvalidCursorError

logger = logging.getLogger(__name__)


def create_error_response(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the `{"error": {code, message, details?}}` envelope."""
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


async def unlingo_exception_handler(
    request: Request, exc: UnlingoException
) -> JSONResponse:
    """Handle UnlingoException and subclasses."""
    logger.warning(
        "API error: %s (code=%s, status=%d, path=%s)",
        exc.message,
        exc.error_code,
        exc.status_code,
        request.url.path,
        extra={"details": exc.details},
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            code=exc.error_code,
            message=exc.message,
            details=exc.details if exc.details else None,
        ),
    )


async def invalid_cursor_handler(
    request: Request, exc: InvalidCursorError
) -> JSONResponse:
    """Report a malformed pagination cursor as a validation error."""
    logger.info("Invalid cursor (path=%s)", request.url.path)
    return JSONResponse(
        status_code=400,
        content=create_error_response(code="VALIDATION_ERROR", message=str(exc)),
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Unique-constraint violations that escaped the services surface as 409."""
    logger.warning("Integrity error (path=%s): %s", request.url.path, exc.orig)
    return JSONResponse(
        status_code=409,
        content=create_error_response(
            code="DUPLICATE", message="Record conflicts with an existing one"
        ),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert FastAPI request validation errors to the standard format."""
    errors = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error.get("loc", []))
        errors.append(
            {
                "field": loc,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )

    logger.info(
        "Validation error: %d field errors (path=%s)",
        len(errors),
        request.url.path,
    )

    return JSONResponse(
        status_code=400,
        content=create_error_response(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details={"errors": errors},
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Convert standard HTTPExceptions to the standard format."""
    status_code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHENTICATED",
        403: "ACCESS_DENIED",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "DUPLICATE",
        413: "PAYLOAD_TOO_LARGE",
        422: "UNPROCESSABLE_ENTITY",
        500: "INTERNAL_ERROR",
    }

    error_code = status_code_map.get(exc.status_code, "ERROR")
    message = str(exc.detail) if exc.detail else "An error occurred"

    log = logger.error if exc.status_code >= 500 else logger.info
    log("HTTP error %d: %s (path=%s)", exc.status_code, message, request.url.path)

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(code=error_code, message=message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the full traceback but return a generic message to clients."""
    logger.error(
        "Unhandled exception: %s (path=%s)\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )

    return JSONResponse(
        status_code=500,
        content=create_error_response(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(UnlingoException, unlingo_exception_handler)
    app.add_exception_handler(InvalidCursorError, invalid_cursor_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
