# app/core/exceptions.py
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error rendered as ``{"detail", "code"[, "details"]}`` JSON."""

    status_code = 500
    default_code = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class ConflictError(AppError):
    status_code = 409
    default_code = "CONFLICT"


class AuthError(AppError):
    status_code = 401
    default_code = "UNAUTHORIZED"


class TokenExpired(AuthError):
    default_code = "TOKEN_EXPIRED"


class TokenInvalid(AuthError):
    default_code = "TOKEN_INVALID"


class ForbiddenError(AppError):
    status_code = 403
    default_code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    default_code = "NOT_FOUND"


class FileTooLargeError(AppError):
    status_code = 413
    default_code = "FILE_TOO_LARGE"

    def __init__(self, size: int, max_bytes: int):
        super().__init__(
            f"File too large: {size} bytes (max: {max_bytes})",
            details={"size": size, "max_bytes": max_bytes},
        )


class InternalError(AppError):
    status_code = 500
    default_code = "INTERNAL_ERROR"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": {"errors": [
                {"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in exc.errors()
            ]},
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InternalError("Internal server error")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
