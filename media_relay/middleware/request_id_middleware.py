"""
Request ID Middleware

Generates or accepts an X-Request-ID for every request so that logs, error
envelopes and Sentry events for one request can be correlated.

Usage:
    from media_relay.middleware.request_id_middleware import RequestIDMiddleware

    app.add_middleware(RequestIDMiddleware)
"""

import logging
import re
import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Maximum length for client-supplied request IDs
_MAX_REQUEST_ID_LENGTH = 128

# Control characters enable log injection
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")

# Alphanumeric, dots, underscores, hyphens
_VALID_REQUEST_ID_RE = re.compile(r"^[a-zA-Z0-9._-]{1,128}$")

current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def resolve_request_id(raw_request_id: str | None) -> str:
    """
    Return the client-supplied id when it is safe to log, otherwise a new one.
    """
    if not raw_request_id:
        return _new_request_id()

    sanitized = _CONTROL_CHARS_RE.sub("", raw_request_id)[:_MAX_REQUEST_ID_LENGTH]
    if not _VALID_REQUEST_ID_RE.match(sanitized):
        logger.debug("Client-supplied request ID failed validation and was replaced")
        return _new_request_id()
    return sanitized


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attaches a request id to ``request.state.request_id``, to the logging
    context and to the ``X-Request-ID`` response header.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = current_request_id.set(request_id)

        try:
            response = await call_next(request)
        finally:
            current_request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
