"""
Sentry error context utilities.

Helpers that attach structured context and tags to exceptions reported to
Sentry. When Sentry was never initialised (no SENTRY_DSN) the SDK treats every
call as a no-op.
"""

import logging
from typing import Any

import sentry_sdk

logger = logging.getLogger(__name__)


def capture_error(
    exception: Exception,
    context_type: str | None = None,
    context_data: dict[str, Any] | None = None,
    tags: dict[str, str] | None = None,
) -> str | None:
    """
    Capture an exception to Sentry with structured context.

    Args:
        exception: The exception to capture
        context_type: Name of the context block (e.g. 'payment', 'upstream')
        context_data: Additional context information
        tags: Dictionary of tags for filtering

    Returns:
        Event ID if captured, None if Sentry is disabled or capture failed
    """
    try:
        with sentry_sdk.new_scope() as scope:
            if context_type and context_data:
                scope.set_context(context_type, context_data)
            for key, value in (tags or {}).items():
                scope.set_tag(key, str(value))
            return sentry_sdk.capture_exception(exception)
    except Exception as e:
        logger.warning(f"Failed to capture exception to Sentry: {e}")
        return None


def capture_upstream_error(
    exception: Exception,
    provider: str,
    operation: str,
    details: dict[str, Any] | None = None,
) -> str | None:
    """
    Capture a failed third-party call (stripe, supabase, gemini, mmm).

    Args:
        exception: The exception to capture
        provider: Upstream provider name
        operation: Relay operation (e.g. 'create_checkout_session', 'webhook')
        details: Identifiers that help correlate the failure (never secrets)
    """
    context_data = {"provider": provider, "operation": operation}
    if details:
        context_data.update(details)

    return capture_error(
        exception,
        context_type="upstream",
        context_data=context_data,
        tags={"provider": provider, "operation": operation},
    )
