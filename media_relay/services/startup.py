"""
Startup wiring: builds every upstream client once from the validated
configuration and hands them to the application.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from fastapi import Request
from google import genai

from media_relay.config.config import Config
from media_relay.config.supabase_config import create_supabase_client
from media_relay.db.profiles import ProfileStore
from media_relay.security.deps import TokenVerifier
from media_relay.services.analytics import AnalyticsRelay
from media_relay.services.billing import BillingService
from media_relay.services.generation import GenerationRelay
from media_relay.services.webhooks import WebhookIngestor

logger = logging.getLogger(__name__)


@dataclass
class RelayServices:
    """Everything a route handler needs; stored on ``app.state.services``"""

    token_verifier: TokenVerifier
    billing: BillingService
    webhooks: WebhookIngestor
    generation: GenerationRelay
    analytics: AnalyticsRelay
    http_client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self.http_client is not None and not self.http_client.is_closed:
            await self.http_client.aclose()
        await self.generation.aclose()


def build_services(config: Config) -> RelayServices:
    """Construct the production clients for ``config``."""
    supabase_client = create_supabase_client(config)
    profiles = ProfileStore(supabase_client)
    http_client = httpx.AsyncClient()

    services = RelayServices(
        token_verifier=TokenVerifier(supabase_client),
        billing=BillingService(
            profiles,
            api_key=config.stripe_secret_key,
            price_id=config.stripe_price_id,
            app_url=config.app_url,
            trial_period_days=config.trial_period_days,
        ),
        webhooks=WebhookIngestor(profiles, webhook_secret=config.stripe_webhook_secret),
        generation=GenerationRelay(genai.Client(api_key=config.gemini_api_key)),
        analytics=AnalyticsRelay(
            http_client, endpoint=config.mmm_api_url, api_key=config.mmm_api_key
        ),
        http_client=http_client,
    )
    logger.info("Upstream clients initialized (supabase, stripe, gemini, mmm)")
    return services


@asynccontextmanager
async def lifespan(app):
    """
    Application lifespan manager: closes the upstream clients on shutdown.
    """
    logger.info("Relay starting")
    try:
        yield
    finally:
        services: RelayServices = app.state.services
        await services.aclose()
        logger.info("Relay shut down")


def get_services(request: Request) -> RelayServices:
    """FastAPI dependency returning the services built at startup"""
    return request.app.state.services
