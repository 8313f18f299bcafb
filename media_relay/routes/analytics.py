"""
MMM analytics proxy endpoint
"""

from fastapi import APIRouter, Depends, Request, Response

from media_relay.schemas.auth import Principal
from media_relay.security.deps import get_current_principal
from media_relay.services.startup import RelayServices, get_services
from media_relay.utils.request_body import read_json

router = APIRouter(tags=["Analytics"])


@router.post("/proxy")
async def analytics_proxy(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    services: RelayServices = Depends(get_services),
):
    """
    Run a marketing-mix-model analysis.

    The JSON body is forwarded as-is; the MMM service's status code and body
    are returned unchanged, including error statuses.
    """
    payload = await read_json(request)
    upstream = await services.analytics.forward(payload)
    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        media_type=upstream.media_type,
    )
