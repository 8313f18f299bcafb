"""
Tests for BillingService: checkout and portal sessions against patched Stripe calls
"""

from unittest.mock import MagicMock

import pytest
import stripe

from media_relay.db.profiles import ProfileStore
from media_relay.schemas.auth import Principal
from media_relay.services.billing import BillingService
from media_relay.utils.exceptions import Forbidden, ProfileNotFound, UpstreamFailure
from tests.helpers.mocks import USER_EMAIL, USER_ID, mock_profile


@pytest.fixture
def principal():
    return Principal(id=USER_ID, email=USER_EMAIL)


@pytest.fixture
def billing(profile_store, test_config):
    return BillingService(
        profile_store,
        api_key=test_config.stripe_secret_key,
        price_id=test_config.stripe_price_id,
        app_url=test_config.app_url,
        trial_period_days=test_config.trial_period_days,
    )


class TestCreateCheckoutSession:
    @pytest.mark.asyncio
    async def test_creates_customer_and_session(self, billing, principal, stripe_api, supabase_mock):
        session_id = await billing.create_checkout_session(principal, USER_ID)

        assert session_id == "cs_test_123"

        customer_kwargs = stripe_api.customer_create.call_args[1]
        assert customer_kwargs["email"] == USER_EMAIL
        assert customer_kwargs["metadata"] == {"supabase_user_id": USER_ID}
        assert customer_kwargs["api_key"] == "sk_test_123456789"

        session_kwargs = stripe_api.session_create.call_args[1]
        assert session_kwargs["customer"] == "cus_new123"
        assert session_kwargs["mode"] == "subscription"
        assert session_kwargs["line_items"] == [{"price": "price_test_monthly", "quantity": 1}]
        assert session_kwargs["subscription_data"] == {"trial_period_days": 2}
        assert session_kwargs["success_url"] == "https://dashboard.example.com?payment_success=true"
        assert session_kwargs["cancel_url"] == "https://dashboard.example.com?payment_cancel=true"

        assert supabase_mock.rows("user_profiles")[0]["stripe_customer_id"] == "cus_new123"

    @pytest.mark.asyncio
    async def test_customer_is_created_once(self, billing, principal, stripe_api):
        await billing.create_checkout_session(principal, USER_ID)
        await billing.create_checkout_session(principal, USER_ID)

        assert stripe_api.customer_create.call_count == 1
        assert stripe_api.session_create.call_count == 2
        for call in stripe_api.session_create.call_args_list:
            assert call[1]["customer"] == "cus_new123"

    @pytest.mark.asyncio
    async def test_existing_customer_is_reused(self, supabase_mock, principal, stripe_api, test_config):
        supabase_mock.store["user_profiles"] = [mock_profile(stripe_customer_id="cus_existing")]
        billing = BillingService(
            ProfileStore(supabase_mock),
            api_key=test_config.stripe_secret_key,
            price_id=test_config.stripe_price_id,
            app_url=test_config.app_url,
            trial_period_days=test_config.trial_period_days,
        )

        await billing.create_checkout_session(principal, USER_ID)

        stripe_api.customer_create.assert_not_called()
        assert stripe_api.session_create.call_args[1]["customer"] == "cus_existing"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested", ["user-999", "", None])
    async def test_other_user_id_is_forbidden(self, billing, principal, stripe_api, supabase_mock, requested):
        with pytest.raises(Forbidden) as exc_info:
            await billing.create_checkout_session(principal, requested)

        assert exc_info.value.status_code == 403
        assert exc_info.value.error == "User token does not match requested user ID."
        stripe_api.customer_create.assert_not_called()
        stripe_api.session_create.assert_not_called()
        assert supabase_mock.mutations == []

    @pytest.mark.asyncio
    async def test_missing_profile(self, billing, stripe_api, supabase_mock):
        supabase_mock.store["user_profiles"] = []
        principal = Principal(id=USER_ID, email=USER_EMAIL)

        with pytest.raises(ProfileNotFound) as exc_info:
            await billing.create_checkout_session(principal, USER_ID)

        assert exc_info.value.status_code == 404
        stripe_api.customer_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_link_keeps_stored_customer(self, billing, principal, stripe_api, supabase_mock):
        """Another request linked a customer between our read and our write."""

        def link_first(**kwargs):
            supabase_mock.store["user_profiles"][0]["stripe_customer_id"] = "cus_winner"
            return MagicMock(id="cus_loser")

        stripe_api.customer_create.side_effect = link_first

        await billing.create_checkout_session(principal, USER_ID)

        assert supabase_mock.rows("user_profiles")[0]["stripe_customer_id"] == "cus_winner"
        assert stripe_api.session_create.call_args[1]["customer"] == "cus_winner"

    @pytest.mark.asyncio
    async def test_stripe_error_becomes_upstream_failure(self, billing, principal, stripe_api):
        stripe_api.session_create.side_effect = stripe.InvalidRequestError(
            "No such price: 'price_test_monthly'", param="line_items[0][price]"
        )

        with pytest.raises(UpstreamFailure) as exc_info:
            await billing.create_checkout_session(principal, USER_ID)

        assert exc_info.value.status_code == 500
        assert "No such price" in exc_info.value.details


class TestCreatePortalSession:
    @pytest.mark.asyncio
    async def test_uses_stored_customer(self, supabase_mock, principal, stripe_api, billing):
        supabase_mock.store["user_profiles"][0]["stripe_customer_id"] = "cus_existing"

        url = await billing.create_portal_session(principal)

        assert url == "https://billing.stripe.com/p/session/test_123"
        kwargs = stripe_api.portal_create.call_args[1]
        assert kwargs["customer"] == "cus_existing"
        assert kwargs["return_url"] == "https://dashboard.example.com"

    @pytest.mark.asyncio
    async def test_no_customer_is_not_found(self, billing, principal, stripe_api):
        with pytest.raises(ProfileNotFound) as exc_info:
            await billing.create_portal_session(principal)

        assert exc_info.value.error == "Stripe customer ID not found for user."
        stripe_api.portal_create.assert_not_called()
        stripe_api.customer_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_profile_is_not_found(self, billing, stripe_api, supabase_mock):
        supabase_mock.store["user_profiles"] = []

        with pytest.raises(ProfileNotFound):
            await billing.create_portal_session(Principal(id=USER_ID))

        stripe_api.portal_create.assert_not_called()
