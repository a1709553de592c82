"""Global exception handlers.

Every error leaves the API as an ``ErrorResponse``: ``{"type", "message"}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException, ConflictError
from app.models.error import ErrorResponse

logger = logging.getLogger("app.exception")

# Pydantic location prefixes that only say where the field came from
_LOCATION_PREFIXES = ("body", "query", "path", "header")


def error_response(
    status_code: int,
    error_type: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(type=error_type, message=message)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(), headers=headers
    )


def _request_extra(request: Request) -> dict[str, object]:
    return {
        "method": request.method,
        "path": request.url.path,
        "request_id": getattr(request.state, "request_id", None),
    }


def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render any AppException subclass."""
    extra = {
        **_request_extra(request),
        "status_code": exc.status_code,
        "error_type": exc.error_type,
    }
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s: %s", exc.error_type, exc.message, extra=extra)
    return error_response(exc.status_code, exc.error_type, exc.message, exc.headers)


def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A unique constraint lost a race with a concurrent write."""
    logger.warning(
        "Integrity error: %s",
        exc.orig,
        extra={**_request_extra(request), "status_code": 409},
    )
    return app_exception_handler(request, ConflictError())


def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Framework errors such as unknown routes (404) or wrong methods (405)."""
    return error_response(
        exc.status_code,
        "http_error",
        str(exc.detail),
        getattr(exc, "headers", None),
    )


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """A throttling window is exhausted; tell the client when to retry."""
    logger.warning(
        "Rate limit %s exceeded by %s",
        exc.detail,
        get_remote_address(request),
        extra={**_request_extra(request), "status_code": 429},
    )
    headers = None
    if exc.limit is not None:
        headers = {"Retry-After": str(exc.limit.limit.get_expiry())}
    return error_response(
        429, "rate_limited", "Too many requests, please try again later", headers
    )


def _format_validation_error(error: dict) -> str:
    location = [str(part) for part in error["loc"]]
    if location and location[0] in _LOCATION_PREFIXES:
        location = location[1:]
    field = ".".join(location)
    return f"{field}: {error['msg']}" if field else error["msg"]


def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Join every pydantic error into one message, e.g. ``email: ...; password: ...``."""
    message = "; ".join(_format_validation_error(error) for error in exc.errors())
    return error_response(422, "validation_error", message)


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception: %s %s - %s",
        request.method,
        request.url.path,
        exc,
        extra={**_request_extra(request), "status_code": 500},
        exc_info=True,
    )
    return error_response(500, "internal_error", AppException.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
