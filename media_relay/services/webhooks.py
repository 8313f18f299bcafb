"""
Stripe Webhook Ingestor
Verifies webhook signatures and projects subscription state into user_profiles
"""

import logging
from typing import Any

import stripe

from media_relay.constants import (
    EVENT_CHECKOUT_COMPLETED,
    EVENT_SUBSCRIPTION_DELETED,
    EVENT_SUBSCRIPTION_UPDATED,
)
from media_relay.db.profiles import ProfileStore
from media_relay.schemas.billing import WebhookProcessingResult
from media_relay.schemas.common import SubscriptionStatus
from media_relay.utils.exceptions import InvalidSignature
from media_relay.utils.sentry_context import capture_upstream_error

logger = logging.getLogger(__name__)


def _get_stripe_object_value(obj: Any, attr: str) -> Any:
    """
    Safely extract a field from a Stripe object (dict-like or attribute-based).
    """
    if obj is None:
        return None

    if isinstance(obj, dict):
        return obj.get(attr)

    try:
        return obj[attr]
    except (KeyError, TypeError, IndexError):
        return getattr(obj, attr, None)


class WebhookIngestor:
    """Turns verified Stripe events into subscription fields on user profiles"""

    def __init__(self, profiles: ProfileStore, *, webhook_secret: str):
        self.profiles = profiles
        self.webhook_secret = webhook_secret

    def verify(self, payload: bytes, signature: str | None) -> Any:
        """
        Check the ``stripe-signature`` header against the raw body.

        Nothing in the body is trusted until this returns.

        Raises:
            InvalidSignature: missing header, bad or stale signature, or a
                payload that is not a Stripe event
        """
        if not signature:
            logger.error("Missing Stripe signature header")
            raise InvalidSignature(details="Missing stripe-signature header")

        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.error(f"Webhook signature verification failed: {e}")
            raise InvalidSignature(details=str(e)) from None
        except ValueError as e:
            logger.error(f"Webhook payload could not be parsed: {e}")
            raise InvalidSignature(details=f"Invalid payload: {e}") from None

    async def handle(self, payload: bytes, signature: str | None) -> WebhookProcessingResult:
        """
        Verify then dispatch one webhook delivery.

        Data store failures propagate so the caller answers with a 5xx and
        Stripe redelivers the event on its own schedule.
        """
        event = self.verify(payload, signature)

        event_type = _get_stripe_object_value(event, "type")
        event_id = _get_stripe_object_value(event, "id")
        event_object = _get_stripe_object_value(_get_stripe_object_value(event, "data"), "object")
        logger.info(f"Processing webhook: {event_type} (ID: {event_id})")

        try:
            if event_type == EVENT_CHECKOUT_COMPLETED:
                updated = await self._handle_checkout_completed(event_object)
            elif event_type in (EVENT_SUBSCRIPTION_UPDATED, EVENT_SUBSCRIPTION_DELETED):
                updated = await self._handle_subscription_changed(event_object)
            else:
                logger.info(f"Ignoring unhandled webhook event type: {event_type}")
                return WebhookProcessingResult(
                    event_id=event_id, event_type=event_type or "unknown", handled=False
                )
        except Exception as e:
            logger.error(f"Error processing Stripe webhook event {event_type}: {e}", exc_info=True)
            capture_upstream_error(
                e, provider="supabase", operation="webhook", details={"event_type": event_type}
            )
            raise

        return WebhookProcessingResult(
            event_id=event_id,
            event_type=event_type,
            handled=updated is not None,
            profiles_updated=updated or 0,
        )

    async def _handle_checkout_completed(self, session: Any) -> int | None:
        """Mark the customer's profile as trialing on a completed subscription checkout"""
        if _get_stripe_object_value(session, "mode") != "subscription":
            logger.info("Ignoring checkout.session.completed outside subscription mode")
            return None

        return await self._project(
            _get_stripe_object_value(session, "customer"),
            {
                "subscription_id": _get_stripe_object_value(session, "subscription"),
                "subscription_status": SubscriptionStatus.TRIALING.value,
            },
        )

    async def _handle_subscription_changed(self, subscription: Any) -> int | None:
        """Mirror the subscription's reported status"""
        status = _get_stripe_object_value(subscription, "status")
        if not status:
            logger.warning("Subscription event carries no status; nothing to update")
            return 0
        if not SubscriptionStatus.is_known(status):
            logger.warning(f"Stripe reported an unrecognised subscription status: {status!r}")

        return await self._project(
            _get_stripe_object_value(subscription, "customer"),
            {"subscription_status": status},
        )

    async def _project(self, customer_id: str | None, fields: dict[str, Any]) -> int:
        if not customer_id:
            logger.warning("Webhook event carries no customer id; nothing to update")
            return 0

        updated = await self.profiles.update_by_customer_id(customer_id, fields)
        if updated == 0:
            logger.warning(f"No user profile linked to Stripe customer {customer_id}")
        else:
            logger.info(f"Updated {updated} profile(s) for customer {customer_id}: {fields}")
        return updated
