"""Gemini generation relay

Forwards a prompt to Google Gemini through the google-genai SDK and returns
the generated text.
"""

import logging
from typing import Any

from google import genai

from media_relay.utils.exceptions import BadRequest, UpstreamFailure
from media_relay.utils.sentry_context import capture_upstream_error

logger = logging.getLogger(__name__)


class GenerationRelay:
    """One ``generate_content`` call per request"""

    def __init__(self, client: genai.Client):
        self.client = client

    async def generate(self, prompt: Any, model: str | None, config: dict[str, Any] | None = None) -> str:
        """
        Generate text for ``prompt`` with ``model``.

        Args:
            prompt: Contents sent to the model (usually a string)
            model: Gemini model name, e.g. "gemini-2.5-flash"
            config: GenerateContentConfig options, forwarded unchanged

        Returns:
            The response text ("" when the model returned no text part)
        """
        if not prompt or not model:
            raise BadRequest("Missing required fields: prompt and model.")

        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config or {},
            )
        except Exception as e:
            logger.error(f"Error calling Google GenAI API (model={model}): {e}", exc_info=True)
            capture_upstream_error(e, provider="gemini", operation="generate_content", details={"model": model})
            raise UpstreamFailure("Failed to get response from AI model.", details=str(e)) from e

        return response.text or ""

    async def aclose(self) -> None:
        """Close the SDK's async transport."""
        await self.client.aio.aclose()
