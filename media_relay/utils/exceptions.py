"""
Relay Exceptions

Every failure the relay reports to a client is one of these exceptions. Each
carries its HTTP status, the short ``error`` message and optional ``details``
that make up the JSON error envelope.

Usage:
    from media_relay.utils.exceptions import Forbidden

    raise Forbidden("User token does not match requested user ID.")
"""

from typing import ClassVar


class RelayError(Exception):
    """Base class for errors rendered as ``{"error": ..., "details": ...}``."""

    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = "Internal Server Error"

    def __init__(self, error: str | None = None, details: str | None = None):
        self.error = error or self.default_message
        self.details = details
        super().__init__(self.error)


class Unauthenticated(RelayError):
    """401 - no usable bearer credential was sent."""

    status_code = 401
    default_message = "Missing or invalid Authorization header"


class InvalidToken(RelayError):
    """401 - the identity provider rejected the bearer credential."""

    status_code = 401
    default_message = "Invalid access token"


class Forbidden(RelayError):
    status_code = 403
    default_message = "Access forbidden"


class NotFound(RelayError):
    status_code = 404
    default_message = "Not found"


class ProfileNotFound(NotFound):
    default_message = "User profile not found."


class BadRequest(RelayError):
    status_code = 400
    default_message = "Bad request"


class InvalidSignature(BadRequest):
    """400 - webhook payload failed signature verification."""

    default_message = "Webhook signature verification failed"


class UpstreamFailure(RelayError):
    """500 - a third-party call failed, including network and parse errors."""

    status_code = 500
    default_message = "Upstream service failure"


class DataStoreError(UpstreamFailure):
    """500 - the Supabase data store call failed."""

    default_message = "Data store request failed"


class ConfigError(RelayError):
    """Missing or malformed configuration. Fatal at startup, 500 at request time."""

    status_code = 500
    default_message = "Server configuration error"
