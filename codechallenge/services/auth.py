import logging
from typing import Optional

import httpx

from config import AuthConfig
from codechallenge.db import KeyStore
from codechallenge.services.errors import AuthError

log = logging.getLogger(__name__)


class ClerkTokenProvider:
    """
    Exchanges a user's linked identity session for a short-lived JWT.

    Called once per outbound request; nothing is cached here.
    """

    def __init__(
        self,
        config: AuthConfig,
        store: KeyStore,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = config.api_url.rstrip("/")
        self._secret_key = config.secret_key
        self.store = store
        self._transport = transport

    def is_signed_in(self, user_id: int) -> bool:
        return bool(self.store.get_session(user_id))

    def getter(self, user_id: int):
        async def _get() -> Optional[str]:
            return await self.fetch_token(user_id)

        return _get

    async def fetch_token(self, user_id: int) -> str:
        session_id = self.store.get_session(user_id)
        if not session_id:
            raise AuthError("Not signed in. Use /signin first.")

        url = f"{self.api_url}/sessions/{session_id}/tokens"
        headers = {"Authorization": f"Bearer {self._secret_key}"}

        try:
            async with httpx.AsyncClient(timeout=15, transport=self._transport) as client:
                r = await client.post(url, headers=headers)
        except httpx.HTTPError as e:
            log.warning("Token exchange failed for user=%s: %s", user_id, e)
            raise AuthError("Identity provider unreachable.") from e

        if r.status_code in (401, 403, 404):
            log.info("Identity session rejected for user=%s (%s)", user_id, r.status_code)
            raise AuthError("Your sign-in expired. Use /signin again.")
        if r.status_code >= 400:
            raise AuthError(f"Identity provider error ({r.status_code}).")

        try:
            jwt = r.json().get("jwt")
        except (ValueError, AttributeError):
            jwt = None
        if not jwt:
            raise AuthError("Identity provider returned no token.")
        return str(jwt)
