"""Centralized error handling for the API layer.

Every error leaves the relay in the same ``{"ok": false, "error": ...}``
envelope that successful syncs use, with an HTTP status taken from the
domain exception type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...domain.exceptions import (
    ConfigurationException,
    DomainException,
    PayloadTooLargeException,
    ProtocolException,
    SyncValidationException,
    UnauthorizedException,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    model_config = ConfigDict(strict=True, frozen=True)

    ok: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error message")
    code: str | None = Field(None, description="Error code")


# Mapping of domain exception types to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[DomainException], int] = {
    UnauthorizedException: status.HTTP_401_UNAUTHORIZED,
    PayloadTooLargeException: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    SyncValidationException: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConfigurationException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ProtocolException: status.HTTP_502_BAD_GATEWAY,
}

# Gate rejections keep the bare {"ok": false, "error": ...} body
BARE_ENVELOPE_EXCEPTIONS: tuple[type[DomainException], ...] = (
    UnauthorizedException,
    PayloadTooLargeException,
)


def status_for(exc: DomainException) -> int:
    """Resolve the status code of a domain exception, honouring subclasses."""
    for exc_type in type(exc).__mro__:
        if exc_type in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[exc_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_error_response(message: str, status_code: int, code: str | None = None) -> JSONResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable error
        status_code: HTTP status code
        code: Optional machine-readable error code

    Returns:
        JSONResponse with error information
    """
    error_response = ErrorResponse(error=message, code=code)
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(exclude_none=True),
    )


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Handle domain-specific exceptions."""
    logger.warning(
        f"Domain exception on {request.method} {request.url.path}: "
        f"{exc.message} (code: {exc.error_code})"
    )
    code = None if isinstance(exc, BARE_ENVELOPE_EXCEPTIONS) else exc.error_code
    return create_error_response(exc.message, status_for(exc), code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body validation errors (e.g. a body that is not a JSON object)."""
    errors = exc.errors()
    logger.warning(f"Validation error on {request.method} {request.url.path}: {len(errors)} errors")

    first_error = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", []))
    msg = first_error.get("msg", "Invalid input data")

    return create_error_response(
        f"Validation failed for field '{field}': {msg}",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions (404, 405, ...) with the relay envelope."""
    logger.info(
        f"HTTP exception on {request.method} {request.url.path}: {exc.status_code} - {exc.detail}"
    )
    return create_error_response(str(exc.detail), exc.status_code, f"HTTP_{exc.status_code}")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return create_error_response(
        "An internal server error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)
