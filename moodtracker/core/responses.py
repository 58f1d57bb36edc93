"""JSON envelope and error mapping.

Every API response is ``{"success": true, "data"|"message": ...}`` or
``{"success": false, "error": ..., "details"?: [...]}``.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from moodtracker.core.result import Err, ErrorKind, Ok, Result
from moodtracker.core.validation import ValidationFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Status codes for errors returned by owner-checking services
SERVICE_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}

# At the credential boundary an unauthorized result means "not authenticated"
AUTH_STATUS: dict[ErrorKind, int] = {**SERVICE_STATUS, ErrorKind.UNAUTHORIZED: 401}


class ApiError(HTTPException):
    """HTTPException rendered in the failure envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: list[Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.details = details


def success(
    data: Any = None,
    status_code: int = 200,
    message: str | None = None,
    **extra: Any,
) -> JSONResponse:
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    if message is not None:
        content["message"] = message
    content.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content, by_alias=True))


def failure(
    status_code: int,
    error: str,
    details: list[Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def unwrap(result: Result[T], statuses: dict[ErrorKind, int] = SERVICE_STATUS) -> T:
    """Return the Ok value or raise the ApiError matching the Err kind."""
    if isinstance(result, Ok):
        return result.value
    if not isinstance(result, Err):
        raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")
    status_code = statuses.get(result.kind, 500)
    message = INTERNAL_ERROR_MESSAGE if status_code == 500 else result.message
    raise ApiError(status_code, message)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    details = getattr(exc, "details", None)
    return failure(exc.status_code, str(exc.detail), details=details, headers=getattr(exc, "headers", None))


async def _validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    return failure(400, exc.message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return failure(400, "Invalid request", details=details)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return failure(500, INTERNAL_ERROR_MESSAGE)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(ValidationFailure, _validation_failure_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
