import logging

from supabase import Client, create_client
from supabase.client import ClientOptions

from media_relay.config.config import Config
from media_relay.constants import SERVICE_NAME

logger = logging.getLogger(__name__)


def create_supabase_client(config: Config) -> Client:
    """
    Build the service-role Supabase client used for token checks and profile access.

    The relay never signs users in itself, so session persistence and token
    refresh are disabled.
    """
    masked_url = config.supabase_url[:30] + "..." if len(config.supabase_url) > 30 else config.supabase_url
    logger.info(f"Initializing Supabase client with URL: {masked_url}")

    return create_client(
        supabase_url=config.supabase_url,
        supabase_key=config.supabase_service_role_key,
        options=ClientOptions(
            schema="public",
            headers={"X-Client-Info": f"{SERVICE_NAME}/1.0"},
            auto_refresh_token=False,
            persist_session=False,
        ),
    )
