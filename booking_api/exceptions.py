import logging
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Optional

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BookingError):
    status_code = 400


class NotFoundError(BookingError):
    status_code = 404


class InvalidReferenceError(NotFoundError):
    """A create request points at a user that is missing or has the wrong role."""

    status_code = 400


class ConflictError(BookingError):
    status_code = 409


class AuthError(BookingError):
    status_code = 401


class ForbiddenError(BookingError):
    status_code = 403


class InternalError(BookingError):
    status_code = 500


# Raised by repositories when a storage-level uniqueness constraint fires
class SlotTakenError(Exception):
    pass


class EmailTakenError(Exception):
    pass


def create_error_response(error_message: str) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

def create_success_response(data: Any, **extra: Any) -> dict:
    """Create a standardized success response"""
    body = {
        "success": True,
        "data": data,
        "error": None
    }
    body.update(extra)
    return body

async def booking_exception_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message)
    )

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # HTTPBearer rejects a missing header with 403; report it as 401
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required")
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )

async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "invalid request"
    return JSONResponse(status_code=400, content=create_error_response(message))

async def storage_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Storage failures are logged in full and reported as a generic 500."""
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return await booking_exception_handler(request, InternalError("storage unavailable"))
