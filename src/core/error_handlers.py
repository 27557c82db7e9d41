"""Exception handlers that turn errors into ``{success: false, error}`` bodies.

Exceptions short-circuit inside an operation; these handlers are the single
place where they are converted to HTTP responses.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import LearningHubError, UpstreamError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def learning_hub_error_handler(request: Request, exc: LearningHubError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        message = exc.message if exc.expose else exc.public_message
        return error_response(exc.status_code, message)
    return error_response(exc.status_code, exc.message)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first invalid field as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid value")
    return error_response(400, f"{field}: {message}" if field else message)


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(500, UpstreamError.public_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LearningHubError, learning_hub_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
