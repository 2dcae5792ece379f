"""
errors.py — API error taxonomy and the centralized exception handlers.
Services raise ApiError subclasses; every failure reaches the client as
{"success": false, "message": ...}.
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import APP_ENV

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error with an HTTP status code. Operational errors are expected failures."""

    status_code = 500
    default_message = "Internal Server Error"
    is_operational = True

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad Request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class UnprocessableEntity(ApiError):
    status_code = 422
    default_message = "Unprocessable Entity"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too Many Requests"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal Server Error"
    is_operational = False


# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the IntegrityError came from a unique constraint or index."""
    orig = exc.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    # SQLite: "UNIQUE constraint failed: ..."
    return "unique constraint" in str(orig).lower()


def _error_response(status_code: int, message: str, exc: Exception | None = None, operational: bool = True) -> JSONResponse:
    body = {"success": False, "message": message}
    if APP_ENV == "development" and exc is not None and not operational:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(p) for p in err.get("loc", ())[1:]] or [str(p) for p in err.get("loc", ())]
        parts.append(f"{'.'.join(loc)}: {err.get('msg', 'invalid value')}")
    return ", ".join(parts) or "Invalid request"


async def api_error_handler(request: Request, exc: ApiError):
    if not exc.is_operational:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message, exc, exc.is_operational)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(400, _format_validation_errors(exc))


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity violation on {request.method} {request.url.path}: {exc.orig}")
    if is_unique_violation(exc):
        return _error_response(409, "Duplicate entry. This record already exists.")
    return _error_response(400, "Invalid reference or missing required field")


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error_response(404, f"Route {request.method} {request.url.path} not found")
    return _error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "Internal Server Error", exc, operational=False)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
