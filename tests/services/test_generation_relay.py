"""Tests for GenerationRelay"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from media_relay.services.generation import GenerationRelay
from media_relay.utils.exceptions import BadRequest, UpstreamFailure


class TestGenerate:
    @pytest.mark.asyncio
    async def test_returns_text(self, genai_client):
        relay = GenerationRelay(genai_client)

        text = await relay.generate("Plan a launch", "gemini-2.5-flash", {"temperature": 0.2})

        assert text == "Generated strategy"
        genai_client.aio.models.generate_content.assert_awaited_once_with(
            model="gemini-2.5-flash",
            contents="Plan a launch",
            config={"temperature": 0.2},
        )

    @pytest.mark.asyncio
    async def test_missing_config_sends_empty_config(self, genai_client):
        await GenerationRelay(genai_client).generate("Plan a launch", "gemini-2.5-flash")

        assert genai_client.aio.models.generate_content.call_args[1]["config"] == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "prompt,model",
        [(None, "gemini-2.5-flash"), ("", "gemini-2.5-flash"), ("Plan a launch", None), ("Plan", "")],
    )
    async def test_missing_fields_rejected_before_upstream(self, genai_client, prompt, model):
        with pytest.raises(BadRequest) as exc_info:
            await GenerationRelay(genai_client).generate(prompt, model)

        assert exc_info.value.error == "Missing required fields: prompt and model."
        genai_client.aio.models.generate_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_upstream_error_becomes_upstream_failure(self):
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("model not found"))

        with pytest.raises(UpstreamFailure) as exc_info:
            await GenerationRelay(client).generate("Plan a launch", "gemini-unknown")

        assert exc_info.value.error == "Failed to get response from AI model."
        assert exc_info.value.details == "model not found"

    @pytest.mark.asyncio
    async def test_empty_text_is_empty_string(self):
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=None))

        assert await GenerationRelay(client).generate("Plan a launch", "gemini-2.5-flash") == ""
