"""
neighbora/core/errors.py

Error taxonomy shared by the gates and the handlers, plus the exception handlers
that turn every failure into the response envelope:

    {"success": false, "message": "...", "error": "<CODE>"}

Tracebacks are attached only when DEBUG is on outside production.
"""
import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("neighbora.errors")


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "UNEXPECTED"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# --------- Authentication --------- #

class MissingCredential(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "MISSING_CREDENTIAL"
    default_message = "Authentication token not provided"


class InvalidCredential(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIAL"
    default_message = "Invalid token"


class ExpiredCredential(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "EXPIRED_CREDENTIAL"
    default_message = "Token expired"


class VerificationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "VERIFICATION_FAILED"
    default_message = "Token verification failed"


class ProviderUnavailable(VerificationFailed):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "AUTH_PROVIDER_UNAVAILABLE"
    default_message = "Authentication provider is not configured"


# --------- Authorization --------- #

class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    default_message = "User not authenticated"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Access denied. Admin permissions required"


# --------- Domain --------- #

class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class ValidationFailure(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_FAILURE"
    default_message = "Invalid request"


class Unexpected(AppError):
    pass


# --------- Handlers --------- #

def error_body(message: str, code: str, exc: Optional[BaseException] = None,
               include_trace: bool = False, details: Any = None) -> dict:
    body = {"success": False, "message": message, "error": code}
    if details is not None:
        body["details"] = details
    if include_trace and exc is not None:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


_HTTP_CODES = {
    400: ValidationFailure.code,
    401: Unauthenticated.code,
    403: Forbidden.code,
    404: NotFound.code,
    409: Conflict.code,
}


def register_exception_handlers(app: FastAPI, *, show_traces: bool) -> None:
    """Attach envelope-producing handlers to the app."""

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if isinstance(exc, Unexpected):
            logger.error("Unexpected error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code, exc, show_traces, exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body("Invalid request data", ValidationFailure.code, details=errors),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Internal server error", Unexpected.code, exc, show_traces),
        )
