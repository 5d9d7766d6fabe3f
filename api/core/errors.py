"""
Error taxonomy and the JSON error envelope.

Handlers raise the specific subclass; `install_error_handlers` renders every
failure as `{"success": false, "message": ..., "errors"?: [...]}`. Anything
that is not an HTTP error is logged and answered with a generic 500.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header"}


class ApiError(HTTPException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error."

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[dict[str, str]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            status_code=self.http_status,
            detail=message or self.default_message,
            headers=headers,
        )
        self.errors = errors or []


class InvalidInput(ApiError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed."


class Unauthenticated(ApiError):
    """Missing, malformed, or expired bearer token."""

    http_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required."


class Unauthorized(ApiError):
    """Bad credentials at login."""

    http_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials."


class Forbidden(ApiError):
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden."


class NotFound(ApiError):
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class Conflict(ApiError):
    http_status = status.HTTP_409_CONFLICT
    default_message = "Conflict."


class RateLimited(ApiError):
    http_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests."


class Internal(ApiError):
    pass


def field_errors(raw_errors: Iterable[dict[str, Any]]) -> list[dict[str, str]]:
    """
    Flatten pydantic error dicts into `[{"field", "message"}]`.

    Messages raised from our own validators are reported verbatim, without
    pydantic's "Value error, " prefix.
    """
    out: list[dict[str, str]] = []
    for err in raw_errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        ctx = err.get("ctx") or {}
        message = str(ctx["error"]) if "error" in ctx else str(err.get("msg") or "Invalid value.")
        out.append({"field": ".".join(loc) or "body", "message": message})
    return out


def _envelope(message: str, errors: list[dict[str, str]] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail), getattr(exc, "errors", None)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=InvalidInput.http_status,
        content=_envelope(InvalidInput.default_message, field_errors(exc.errors())),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_error method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=Internal.http_status,
        content=_envelope(Internal.default_message),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
