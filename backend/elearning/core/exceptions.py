"""
Error taxonomy and HTTP error translation for the Visnet E-Learning API.

Services raise the exceptions defined here; the handlers registered by
``register_exception_handlers`` turn them (and any framework or unexpected
error) into the standard ``{"status": "ERROR", "message": ...}`` envelope.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings


logger = logging.getLogger(__name__)


class LMSException(Exception):
    """
    Base class for expected, user-facing errors.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(LMSException):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation errors"


class AuthError(LMSException):
    """Missing, invalid or expired credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthorizationError(LMSException):
    """Role or ownership mismatch."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(LMSException):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(LMSException):
    """Duplicate email, enrollment, slug and similar uniqueness violations."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(LMSException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def error_body(message: str, **extra: Any) -> Dict[str, Any]:
    """Build the error envelope, dropping empty extras."""
    body: Dict[str, Any] = {"status": "ERROR", "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


async def lms_exception_handler(request: Request, exc: LMSException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, errors=exc.errors)
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        # Unknown route rather than a missing entity
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("Route not found", path=request.url.path)
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            "message": error["msg"]
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation errors", errors=errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "Internal server error",
            error=str(exc) if settings.DEBUG else None
        )
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all error handlers to the application."""
    app.add_exception_handler(LMSException, lms_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
