"""Centralized error translation.

Handlers raise; this module turns every exception into the failure envelope
``{"status": "fail" | "error", "message": ...}``. Operational errors keep
their message. Library errors with a known shape are translated into
operational ones. Anything else is logged and, outside development, reduced
to a generic message.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from natours.config import settings
from natours.core.errors import AppError, RateLimitError

logger = logging.getLogger(__name__)


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "fail" if status_code < 500 else "error", "message": message},
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", "")).removeprefix("Value error, ")
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        if location and error.get("type") != "value_error":
            message = f"{'.'.join(location)}: {message}"
        messages.append(message)
    return "Invalid input data. " + ". ".join(messages)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        response.headers["Retry-After"] = str(exc.retry_after)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _fail(status.HTTP_400_BAD_REQUEST, _validation_message(exc))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.info(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return _fail(status.HTTP_400_BAD_REQUEST, "Duplicate field value. Please use another value!")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Can't find {request.url.path} on this server!"
    else:
        message = str(exc.detail)
    response = _fail(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    if settings.is_production:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went very wrong!")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": str(exc),
            "error": type(exc).__name__,
            "stack": traceback.format_exception(exc),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install every handler on ``app``."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
