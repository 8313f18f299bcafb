import logging

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from media_relay import __version__
from media_relay.config import Config
from media_relay.config.logging_config import configure_logging
from media_relay.constants import (
    ANALYTICS_PREFIX,
    APP_NAME,
    BILLING_PREFIX,
    GENERATION_PREFIX,
    LEGACY_ANALYTICS_PREFIX,
    LEGACY_BILLING_PREFIX,
    LEGACY_GENERATION_PREFIX,
)
from media_relay.middleware.error_capture_middleware import ErrorCaptureMiddleware
from media_relay.middleware.request_id_middleware import RequestIDMiddleware
from media_relay.routes import analytics, billing, generation, health
from media_relay.services.startup import RelayServices, build_services, lifespan
from media_relay.utils.error_handlers import register_exception_handlers

logger = logging.getLogger(__name__)


def init_sentry(config: Config) -> bool:
    """Initialise Sentry when a DSN is configured. Returns whether it was enabled."""
    if not config.sentry_enabled:
        logger.info("Sentry disabled (SENTRY_DSN not set)")
        return False

    sentry_sdk.init(
        dsn=config.sentry_dsn,
        environment=config.app_env,
        release=f"media-relay-backend@{__version__}",
        send_default_pii=False,
        traces_sample_rate=0.1,
    )
    logger.info(f"Sentry initialized (environment: {config.app_env})")
    return True


def create_app(config: Config | None = None, services: RelayServices | None = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        config: Validated configuration; read from the environment when omitted
        services: Pre-built upstream clients; built from ``config`` when omitted
            (tests pass fakes here)
    """
    if config is None:
        config = Config.from_env()
        configure_logging(config)
        init_sentry(config)

    if services is None:
        services = build_services(config)

    app = FastAPI(
        title=APP_NAME,
        description="Authenticated relay to Stripe, Gemini and the MMM analytics service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.services = services

    app.add_middleware(ErrorCaptureMiddleware)

    # Browser clients on any origin; auth is bearer tokens, never cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(billing.router, prefix=BILLING_PREFIX)
    app.include_router(generation.router, prefix=GENERATION_PREFIX)
    app.include_router(analytics.router, prefix=ANALYTICS_PREFIX)

    # Paths called by the first frontend release
    app.include_router(billing.router, prefix=LEGACY_BILLING_PREFIX, include_in_schema=False)
    app.include_router(generation.router, prefix=LEGACY_GENERATION_PREFIX, include_in_schema=False)
    app.include_router(analytics.router, prefix=LEGACY_ANALYTICS_PREFIX, include_in_schema=False)

    logger.info(f"{APP_NAME} {__version__} ready (env={config.app_env})")
    return app
