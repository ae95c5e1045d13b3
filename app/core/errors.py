"""
Error Handling
==============

Domain error taxonomy, stable error codes and the exception handlers
that translate both into HTTP responses.

Services raise ``DomainError`` subclasses and never deal with status
codes; ``setup_exception_handlers`` is the single place where errors
become transport responses.
"""

import logging
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes."""

    # Authentication (AUTH_001 - AUTH_010)
    AUTH_INVALID_CREDENTIALS = "AUTH_001"
    AUTH_NOT_AUTHENTICATED = "AUTH_002"
    AUTH_TOKEN_EXPIRED = "AUTH_003"
    AUTH_EMAIL_EXISTS = "AUTH_004"
    AUTH_INVALID_TOKEN = "AUTH_005"
    AUTH_USER_NOT_FOUND = "AUTH_006"

    # Tasks (TASK_001 - TASK_010)
    TASK_NOT_FOUND = "TASK_001"
    TASK_FORBIDDEN = "TASK_002"

    # Rate Limit
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT"

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"


# =============================================================================
# Domain Exceptions
# =============================================================================

class DomainError(Exception):
    """Base class for failures raised by services."""

    default_code = ErrorCodes.INTERNAL_ERROR
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        field: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        detail: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.field:
            detail["field"] = self.field
        return detail


class ValidationError(DomainError):
    """Bad or missing input."""

    default_code = ErrorCodes.VALIDATION_ERROR
    default_message = "Invalid input"


class UnauthorizedError(DomainError):
    """Missing, invalid or expired token, or bad credentials."""

    default_code = ErrorCodes.AUTH_NOT_AUTHENTICATED
    default_message = "Not authenticated"


class ForbiddenError(DomainError):
    """Authenticated, but not the owner of the resource."""

    default_code = ErrorCodes.TASK_FORBIDDEN
    default_message = "Not authorized to access this resource"


class NotFoundError(DomainError):
    """No such resource."""

    default_code = ErrorCodes.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(DomainError):
    """Duplicate value for a unique field."""

    default_code = ErrorCodes.AUTH_EMAIL_EXISTS
    default_message = "Resource already exists"


class InternalError(DomainError):
    """Unexpected store or infrastructure failure."""


_STATUS_BY_ERROR: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(exc: DomainError) -> int:
    """Resolve the HTTP status for a domain error (walks the MRO)."""
    for klass in type(exc).__mro__:
        if klass in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[klass]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(error: dict[str, Any]) -> dict[str, Any]:
    """Standard failure envelope."""
    return {
        "success": False,
        "message": error["message"],
        "error": error,
    }


# =============================================================================
# Exception Handlers
# =============================================================================

async def domain_exception_handler(
    request: Request,
    exc: DomainError,
) -> JSONResponse:
    """Handler for DomainError."""
    status_code = status_code_for(exc)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if status_code >= 500:
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc)

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.to_dict()),
        headers=headers,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handler for standard HTTPException (unknown routes, 405, 429)."""
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        error = exc.detail
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        error = {"code": ErrorCodes.NOT_FOUND, "message": "Route not found"}
    else:
        error = {
            "code": ErrorCodes.HTTP_ERROR,
            "message": str(exc.detail),
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for request/Pydantic validation errors (always 400)."""
    if isinstance(exc, (RequestValidationError, PydanticValidationError)):
        errors = exc.errors()
    else:
        errors = []

    if errors:
        first_error = errors[0]
        # Drop the "body"/"query" prefix so clients get the field name
        loc = [str(part) for part in first_error.get("loc", [])]
        if len(loc) > 1 and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        field = ".".join(loc) or None
        message = first_error.get("msg", "Validation error")
    else:
        field = None
        message = str(exc) or "Validation error"

    error: dict[str, Any] = {
        "code": ErrorCodes.VALIDATION_ERROR,
        "message": message,
    }
    if field:
        error["field"] = field

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(error),
    )


async def global_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
    )

    error: dict[str, Any] = {
        "code": ErrorCodes.INTERNAL_ERROR,
        "message": "An unexpected error occurred",
    }
    if not settings.is_production:
        error["detail"] = f"{type(exc).__name__}: {exc}"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(error),
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with FastAPI app.

    Usage:
        from app.core.errors import setup_exception_handlers
        setup_exception_handlers(app)
    """
    app.add_exception_handler(DomainError, domain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
