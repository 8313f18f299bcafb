#!/usr/bin/env python3
"""
Stripe Billing Routes
Checkout, customer portal and webhook endpoints
"""

import logging

from fastapi import APIRouter, Depends, Header, Request

from media_relay.constants import STRIPE_SIGNATURE_HEADER
from media_relay.schemas.auth import Principal
from media_relay.schemas.billing import (
    CheckoutSessionResponse,
    CreateCheckoutSessionRequest,
    PortalSessionResponse,
    WebhookReceipt,
)
from media_relay.security.deps import get_current_principal
from media_relay.services.startup import RelayServices, get_services
from media_relay.utils.exceptions import DataStoreError
from media_relay.utils.request_body import read_json_model

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Billing"])


@router.post("/create-checkout-session")
async def create_checkout_session(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    services: RelayServices = Depends(get_services),
):
    """
    Create a Stripe subscription checkout session for the signed-in user.

    Request body: ``{"userId": "<supabase user id>"}``. The id must be the
    caller's own. Returns ``{"sessionId": "cs_..."}`` for Stripe.js
    ``redirectToCheckout``.
    """
    body = await read_json_model(request, CreateCheckoutSessionRequest)
    session_id = await services.billing.create_checkout_session(principal, body.user_id)
    return CheckoutSessionResponse(session_id=session_id).model_dump(by_alias=True)


@router.post("/create-portal-session")
async def create_portal_session(
    principal: Principal = Depends(get_current_principal),
    services: RelayServices = Depends(get_services),
):
    """
    Create a Stripe customer-portal session for the signed-in user.

    The customer is looked up from the user's profile; nothing in the request
    body is read. Returns ``{"url": "https://billing.stripe.com/..."}``.
    """
    url = await services.billing.create_portal_session(principal)
    return PortalSessionResponse(url=url).model_dump()


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias=STRIPE_SIGNATURE_HEADER),
    services: RelayServices = Depends(get_services),
):
    """
    Stripe webhook endpoint.

    Handled events:
    - checkout.session.completed (subscription mode) - link subscription, status "trialing"
    - customer.subscription.updated - mirror subscription status
    - customer.subscription.deleted - mirror subscription status

    Other events are acknowledged and ignored. A bad signature is a 400; a
    data store failure is a 500 so Stripe redelivers the event.
    """
    payload = await request.body()

    try:
        result = await services.webhooks.handle(payload, stripe_signature)
    except DataStoreError as e:
        raise DataStoreError("Internal Server Error") from e

    logger.info(
        f"Webhook processed: {result.event_type} "
        f"(handled={result.handled}, profiles_updated={result.profiles_updated})"
    )
    return WebhookReceipt().model_dump()
