"""
Gemini proxy endpoint
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from media_relay.schemas.auth import Principal
from media_relay.schemas.generation import GenerationRequest
from media_relay.security.deps import get_current_principal
from media_relay.services.startup import RelayServices, get_services
from media_relay.utils.request_body import read_json_model

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


@router.post("/proxy", response_class=PlainTextResponse)
async def generation_proxy(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    services: RelayServices = Depends(get_services),
):
    """
    Generate content with Gemini.

    Request body: ``{"prompt": ..., "model": "gemini-...", "config": {...}}``.
    The generated text is returned as the raw response body.
    """
    body = await read_json_model(request, GenerationRequest)
    text = await services.generation.generate(body.prompt, body.model, body.config)
    logger.info(f"Generated {len(text)} characters with {body.model} for user {principal.id}")
    return PlainTextResponse(text)
