"""
Shared fixtures: a Config built in code, in-memory Supabase, patched Stripe
SDK calls, a fake Gemini client and an httpx MockTransport standing in for the
MMM service. ``client`` wires them into a real app via ``create_app``.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from media_relay.config import Config
from media_relay.db.profiles import ProfileStore
from media_relay.main import create_app
from media_relay.security.deps import TokenVerifier
from media_relay.services.analytics import AnalyticsRelay
from media_relay.services.billing import BillingService
from media_relay.services.generation import GenerationRelay
from media_relay.services.startup import RelayServices
from media_relay.services.webhooks import WebhookIngestor
from tests.helpers.mocks import (
    MMM_URL,
    USER_EMAIL,
    USER_ID,
    VALID_TOKEN,
    WEBHOOK_SECRET,
    MockSupabaseClient,
    mock_profile,
)


@pytest.fixture
def test_config():
    return Config(
        stripe_secret_key="sk_test_123456789",
        stripe_price_id="price_test_monthly",
        stripe_webhook_secret=WEBHOOK_SECRET,
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-role-key",
        app_url="https://dashboard.example.com",
        gemini_api_key="gemini-test-key",
        mmm_api_key="mmm-test-key",
        mmm_api_url=MMM_URL,
        app_env="test",
    )


@pytest.fixture
def supabase_mock():
    sb = MockSupabaseClient()
    sb.add_auth_user(VALID_TOKEN, user_id=USER_ID, email=USER_EMAIL)
    sb.add_test_data("user_profiles", [mock_profile(user_id=USER_ID, email=USER_EMAIL)])
    return sb


@pytest.fixture
def profile_store(supabase_mock):
    return ProfileStore(supabase_mock)


@pytest.fixture
def stripe_api():
    """Patch the Stripe SDK calls the billing relay makes"""
    with patch("stripe.Customer.create") as customer_create, patch(
        "stripe.checkout.Session.create"
    ) as session_create, patch("stripe.billing_portal.Session.create") as portal_create:
        customer_create.return_value = MagicMock(id="cus_new123")
        session_create.return_value = MagicMock(
            id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123"
        )
        portal_create.return_value = MagicMock(url="https://billing.stripe.com/p/session/test_123")
        yield SimpleNamespace(
            customer_create=customer_create,
            session_create=session_create,
            portal_create=portal_create,
        )


@pytest.fixture
def genai_client():
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text="Generated strategy"))
    client.aio.aclose = AsyncMock()
    return client


@pytest.fixture
def mmm_upstream():
    """
    Programmable MMM service. Set ``status``/``body`` or ``error``; inspect
    ``requests`` afterwards.
    """
    state = SimpleNamespace(status=200, body=json.dumps({"roi": 1.8}).encode(), error=None, requests=[])

    def handler(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        if state.error is not None:
            raise state.error
        return httpx.Response(
            state.status, content=state.body, headers={"Content-Type": "application/json"}
        )

    state.transport = httpx.MockTransport(handler)
    return state


@pytest.fixture
def services(test_config, supabase_mock, profile_store, genai_client, mmm_upstream):
    http_client = httpx.AsyncClient(transport=mmm_upstream.transport)
    return RelayServices(
        token_verifier=TokenVerifier(supabase_mock),
        billing=BillingService(
            profile_store,
            api_key=test_config.stripe_secret_key,
            price_id=test_config.stripe_price_id,
            app_url=test_config.app_url,
            trial_period_days=test_config.trial_period_days,
        ),
        webhooks=WebhookIngestor(profile_store, webhook_secret=test_config.stripe_webhook_secret),
        generation=GenerationRelay(genai_client),
        analytics=AnalyticsRelay(
            http_client, endpoint=test_config.mmm_api_url, api_key=test_config.mmm_api_key
        ),
        http_client=http_client,
    )


@pytest.fixture
def app(test_config, services):
    return create_app(test_config, services)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
