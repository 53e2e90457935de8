"""Boundary error mapper.

Learn: The single place where exceptions become HTTP responses. Every
error body has the same shape:

    {"statusCode": 404, "message": "Note not found", "error": "Not Found"}

`message` is a list of strings for validation failures, a string
otherwise. Domain errors carry their own status code (see errors.py);
FastAPI's request validation errors become 400 with the same message
formatting as body validation. Anything else becomes a logged 500 in
the same shape.
"""

from http import HTTPStatus
from typing import Union

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notekeeper.errors import NotekeeperError
from notekeeper.schemas.validation import format_errors

logger = structlog.get_logger()


def error_body(status_code: int, message: Union[str, list[str]]) -> dict:
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Error"
    return {"statusCode": status_code, "message": message, "error": phrase}


def _auth_headers(status_code: int) -> dict | None:
    return {"WWW-Authenticate": "Bearer"} if status_code == 401 else None


async def notekeeper_error_handler(
    request: Request, exc: NotekeeperError
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "api.server_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=_auth_headers(exc.status_code),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_body(400, format_errors(exc.errors())),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    headers = getattr(exc, "headers", None) or _auth_headers(exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.detail),
        headers=headers,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback: anything not mapped above leaves as a plain 500."""
    logger.exception(
        "api.unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content=error_body(500, "Internal server error"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotekeeperError, notekeeper_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
