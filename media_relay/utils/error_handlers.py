"""
Error Handler Utilities

Converts exceptions into the relay's JSON error envelope.

Usage:
    from media_relay.utils.error_handlers import register_exception_handlers

    # In main.py
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from media_relay.schemas.errors import ErrorResponse
from media_relay.utils.exceptions import RelayError
from media_relay.utils.sentry_context import capture_error

logger = logging.getLogger(__name__)


def _request_id_headers(request: Request) -> dict[str, str] | None:
    request_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": request_id} if request_id else None


def error_response(
    status_code: int, error: str, details: str | None = None, request: Request | None = None
) -> JSONResponse:
    """Render an error envelope, dropping ``details`` when empty."""
    body = ErrorResponse(error=error, details=details or None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=_request_id_headers(request) if request is not None else None,
    )


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render a RelayError with its own status code."""
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.error}"
            + (f" ({exc.details})" if exc.details else "")
        )
    else:
        logger.info(f"{request.method} {request.url.path} rejected with {exc.status_code}: {exc.error}")
    return error_response(exc.status_code, exc.error, exc.details, request)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request input is a 400, not FastAPI's default 422."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    details = f"{location}: {message}" if location else message
    return error_response(400, "Invalid request body", details, request)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown route, wrong method) in the same envelope."""
    return error_response(exc.status_code, str(exc.detail), request=request)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected is logged, reported and hidden behind a generic 500."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    capture_error(
        exc,
        context_type="request",
        context_data={
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return error_response(500, "Internal Server Error", request=request)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
