"""
FastAPI Security Dependencies

Bearer-token verification against Supabase Auth.
"""

import asyncio
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from media_relay.schemas.auth import Principal
from media_relay.utils.exceptions import InvalidToken, Unauthenticated

logger = logging.getLogger(__name__)

# auto_error=False so a missing header renders as our 401 envelope, not FastAPI's 403
security = HTTPBearer(auto_error=False)


class TokenVerifier:
    """Resolves a Supabase access token to the signed-in user"""

    def __init__(self, client: Client):
        self._client = client

    async def verify(self, access_token: str | None) -> Principal:
        """
        Validate ``access_token`` with Supabase Auth.

        Raises:
            Unauthenticated: no token was supplied
            InvalidToken: Supabase rejected the token or returned no user
        """
        if not access_token or not access_token.strip():
            raise Unauthenticated()

        try:
            response = await asyncio.to_thread(self._client.auth.get_user, access_token.strip())
        except Exception as e:
            logger.warning(f"Supabase rejected access token: {e}")
            raise InvalidToken(details=str(e)) from e

        user = getattr(response, "user", None) if response is not None else None
        if user is None or not getattr(user, "id", None):
            raise InvalidToken(details="No user is associated with this token")

        return Principal(id=str(user.id), email=getattr(user, "email", None))


def extract_bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    """Return the token of a ``Bearer <token>`` header or raise Unauthenticated."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated()
    return credentials.credentials


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    """
    Dependency for every user-facing route.

    Runs before the request body is read, so an unauthenticated call is
    always answered with 401 and never reaches an upstream provider.
    """
    token = extract_bearer_token(credentials)
    verifier: TokenVerifier = request.app.state.services.token_verifier
    principal = await verifier.verify(token)
    request.state.user_id = principal.id
    return principal
