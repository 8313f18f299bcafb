"""
Access to the Supabase ``user_profiles`` table.

The Supabase client is synchronous; every call is pushed onto a worker thread
so a slow PostgREST round trip never blocks the event loop.
"""

import asyncio
import logging
from typing import Any

from supabase import Client

from media_relay.constants import PROFILES_TABLE
from media_relay.schemas.auth import UserProfile
from media_relay.utils.exceptions import DataStoreError

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, email, stripe_customer_id, subscription_id, subscription_status"


class ProfileStore:
    """Reads and writes billing linkage on user profiles"""

    def __init__(self, client: Client, table: str = PROFILES_TABLE):
        self._client = client
        self._table = table

    async def _run(self, operation: str, query) -> list[dict[str, Any]]:
        try:
            result = await asyncio.to_thread(query.execute)
        except Exception as e:
            logger.error(f"Supabase {operation} on {self._table} failed: {e}", exc_info=True)
            raise DataStoreError(details=f"{operation}: {e}") from e
        return result.data or []

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile whose id equals ``user_id``, or None."""
        query = self._client.table(self._table).select(PROFILE_COLUMNS).eq("id", user_id).limit(1)
        rows = await self._run("select", query)
        if not rows:
            return None
        return UserProfile.model_validate(rows[0])

    async def set_customer_id(self, user_id: str, customer_id: str) -> bool:
        """
        Store the Stripe customer id for a user unless one is already stored.

        Returns:
            True when the row was written, False when a customer id was
            already present (the existing id is kept).
        """
        query = (
            self._client.table(self._table)
            .update({"stripe_customer_id": customer_id})
            .eq("id", user_id)
            .is_("stripe_customer_id", "null")
        )
        rows = await self._run("update", query)
        return len(rows) > 0

    async def update_by_customer_id(self, customer_id: str, fields: dict[str, Any]) -> int:
        """
        Apply ``fields`` to every profile linked to ``customer_id``.

        Returns:
            Number of profiles updated (0 when the customer is unknown).
        """
        query = (
            self._client.table(self._table)
            .update(fields)
            .eq("stripe_customer_id", customer_id)
        )
        rows = await self._run("update", query)
        return len(rows)
