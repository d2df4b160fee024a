"""Domain error hierarchy and its HTTP rendering."""

from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from profusion.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_dict(self) -> Dict:
        return {"error": self.message}


class ValidationError(AppError):
    """Malformed or missing fields."""

    message = "Invalid request"

    def __init__(self, message: Optional[str] = None, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> Dict:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


class WeakPassword(ValidationError):
    message = "Password does not meet the complexity requirements"


class DuplicateError(AppError):
    message = "Resource already exists"


class DuplicateEmail(DuplicateError):
    message = "Email already exists"


class AuthFailure(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication failed"


class InvalidCredentials(AuthFailure):
    # Same message for unknown email and wrong password
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid email or password"


class Unauthenticated(AuthFailure):
    message = "Access denied. No token provided."


class InvalidToken(AuthFailure):
    message = "Invalid token"


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Permission denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Resource is still referenced"


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal storage error"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthFailure) and exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Storage operation failed",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=StorageError.status_code,
        content=StorageError().to_dict(),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers that render domain and storage errors."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
