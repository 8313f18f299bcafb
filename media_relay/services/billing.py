"""
Stripe Billing Relay
Checkout and customer-portal sessions for the dashboard subscription
"""

import asyncio
import logging
from typing import Any

import stripe

from media_relay.constants import CHECKOUT_CANCEL_QUERY, CHECKOUT_SUCCESS_QUERY
from media_relay.db.profiles import ProfileStore
from media_relay.schemas.auth import Principal, UserProfile
from media_relay.utils.exceptions import Forbidden, ProfileNotFound, UpstreamFailure
from media_relay.utils.sentry_context import capture_upstream_error

logger = logging.getLogger(__name__)


class BillingService:
    """Creates Stripe sessions on behalf of an authenticated Supabase user"""

    def __init__(
        self,
        profiles: ProfileStore,
        *,
        api_key: str,
        price_id: str,
        app_url: str,
        trial_period_days: int,
    ):
        self.profiles = profiles
        self.api_key = api_key
        self.price_id = price_id
        self.app_url = app_url
        self.trial_period_days = trial_period_days

    async def _call_stripe(self, operation: str, func, **params):
        """Run a synchronous Stripe SDK call off the event loop with this relay's key."""
        try:
            return await asyncio.to_thread(func, api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe error during {operation}: {e}", exc_info=True)
            capture_upstream_error(e, provider="stripe", operation=operation)
            raise UpstreamFailure(
                f"Payment provider error during {operation.replace('_', ' ')}",
                details=e.user_message or str(e),
            ) from e

    # ==================== Checkout Sessions ====================

    async def create_checkout_session(self, principal: Principal, user_id: Any) -> str:
        """
        Create a subscription checkout session for ``user_id``.

        Args:
            principal: Authenticated user from the bearer token
            user_id: User id sent by the client; must be the principal's own id

        Returns:
            The Stripe checkout session id
        """
        if not user_id or user_id != principal.id:
            raise Forbidden("User token does not match requested user ID.")

        profile = await self.profiles.get_profile(user_id)
        if profile is None:
            raise ProfileNotFound("User profile not found.")

        customer_id = await self._ensure_customer(principal, profile)

        session = await self._call_stripe(
            "create_checkout_session",
            stripe.checkout.Session.create,
            customer=customer_id,
            mode="subscription",
            line_items=[{"price": self.price_id, "quantity": 1}],
            subscription_data={"trial_period_days": self.trial_period_days},
            success_url=f"{self.app_url}?{CHECKOUT_SUCCESS_QUERY}",
            cancel_url=f"{self.app_url}?{CHECKOUT_CANCEL_QUERY}",
        )

        logger.info(f"Checkout session created: {session.id} for user {user_id}")
        return session.id

    async def _ensure_customer(self, principal: Principal, profile: UserProfile) -> str:
        """Return the stored Stripe customer id, creating and storing one on first use."""
        if profile.stripe_customer_id:
            return profile.stripe_customer_id

        logger.info(f"Creating Stripe customer for user {profile.id}")
        customer = await self._call_stripe(
            "create_customer",
            stripe.Customer.create,
            email=profile.email or principal.email,
            metadata={"supabase_user_id": profile.id},
        )

        if await self.profiles.set_customer_id(profile.id, customer.id):
            logger.info(f"Stripe customer created: {customer.id} for user {profile.id}")
            return customer.id

        # A concurrent request stored a customer first; the stored id stays authoritative.
        stored = await self.profiles.get_profile(profile.id)
        if stored is None or not stored.stripe_customer_id:
            raise ProfileNotFound("User profile not found.")
        logger.warning(
            f"User {profile.id} already linked to {stored.stripe_customer_id}; "
            f"customer {customer.id} left unused"
        )
        return stored.stripe_customer_id

    # ==================== Customer Portal ====================

    async def create_portal_session(self, principal: Principal) -> str:
        """
        Create a billing-portal session for the principal's stored customer.

        The customer id always comes from the profile, never from the client.

        Returns:
            The portal URL
        """
        profile = await self.profiles.get_profile(principal.id)
        if profile is None or not profile.stripe_customer_id:
            raise ProfileNotFound("Stripe customer ID not found for user.")

        portal_session = await self._call_stripe(
            "create_portal_session",
            stripe.billing_portal.Session.create,
            customer=profile.stripe_customer_id,
            return_url=self.app_url,
        )
        return portal_session.url
