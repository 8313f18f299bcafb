"""
Marketing-mix-model (MMM) analytics relay

Transparent proxy: the request JSON goes upstream with the server-held API
key, and the upstream status and body come back unchanged.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from media_relay.constants import ANALYTICS_API_KEY_HEADER
from media_relay.utils.exceptions import ConfigError, UpstreamFailure
from media_relay.utils.sentry_context import capture_upstream_error

logger = logging.getLogger(__name__)

PROXY_FAILURE_MESSAGE = "Failed to proxy request to analytics service."


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    body: bytes
    media_type: str = "application/json"


class AnalyticsRelay:
    """Forwards dashboard analytics requests to the MMM service"""

    def __init__(self, http_client: httpx.AsyncClient, *, endpoint: str, api_key: str | None):
        self.http_client = http_client
        self.endpoint = endpoint
        self.api_key = api_key

    async def forward(self, payload: Any) -> UpstreamResponse:
        """
        POST ``payload`` to the MMM endpoint.

        Non-2xx upstream statuses are returned, not raised.

        Raises:
            ConfigError: the MMM API key is not configured
            UpstreamFailure: network error or a body that is not JSON
        """
        if not self.api_key:
            raise ConfigError("Analytics API key is not configured on the server.")

        try:
            response = await self.http_client.post(
                self.endpoint,
                content=json.dumps(payload),
                headers={
                    "Content-Type": "application/json",
                    ANALYTICS_API_KEY_HEADER: self.api_key,
                },
            )
            response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error proxying request to MMM API: {e}", exc_info=True)
            capture_upstream_error(e, provider="mmm", operation="proxy")
            raise UpstreamFailure(PROXY_FAILURE_MESSAGE, details=str(e)) from e

        if response.status_code >= 400:
            logger.warning(f"MMM API responded with {response.status_code}")

        return UpstreamResponse(status_code=response.status_code, body=response.content)
