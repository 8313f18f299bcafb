"""
Unhandled Exception Middleware

Turns any exception that escapes a route into the generic 500 envelope while
the response is still inside the CORS layer, so browsers can read it.

Starlette sends handlers registered for ``Exception`` to the outermost
ServerErrorMiddleware, which wraps every user middleware including CORS.

Usage:
    from media_relay.middleware.error_capture_middleware import ErrorCaptureMiddleware

    # Add before CORSMiddleware so it sits inside it
    app.add_middleware(ErrorCaptureMiddleware)
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from media_relay.utils.error_handlers import global_exception_handler


class ErrorCaptureMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await global_exception_handler(request, exc)
