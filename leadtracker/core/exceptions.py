"""
Custom exceptions for Lead Tracker API.
Services raise these; the handlers registered in main.py map them to HTTP responses.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class LeadTrackerException(Exception):
    """Base exception for Lead Tracker"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(LeadTrackerException):
    """Validation failed"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        self.errors = []
        if field:
            self.errors.append({"field": field, "message": message})
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class UnauthorizedError(LeadTrackerException):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(LeadTrackerException):
    """Authenticated, but not allowed"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "You don't have permission to access this resource",
        reason: Optional[str] = None
    ):
        self.reason = reason
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "reason": self.reason}


class NotFoundError(LeadTrackerException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id=None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ConflictError(LeadTrackerException):
    """Request conflicts with current state"""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Conflict with current state"):
        super().__init__(message)


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    def __init__(self, resource: str = "Resource", field: str = None, value: str = None):
        if field and value:
            message = f"{resource} with {field} '{value}' already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(message)


# Exception handlers
async def lead_tracker_exception_handler(request: Request, exc: LeadTrackerException):
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LeadTrackerException, lead_tracker_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, unhandled_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
