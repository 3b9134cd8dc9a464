import json
import logging
import secrets
from time import perf_counter
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx

from config import ApiConfig
from codechallenge.services.errors import (
    GENERIC_ERROR,
    QUOTA_EXCEEDED,
    AuthError,
    QuotaExceededError,
    ServerError,
    TransportError,
)

log = logging.getLogger(__name__)

TokenGetter = Callable[[], Awaitable[Optional[str]]]


def _redact(token: str) -> str:
    return f"{token[:8]}..." if token else "none"


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        detail = data.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
    return None


class ApiClient:
    """
    Authenticated request pipeline for the challenge service.

    - fetches a fresh bearer token before every call (never cached)
    - default headers: JSON content type + bearer auth, caller headers win
    - maps failures to typed errors (auth / quota / server / transport)
    - no retries, no state kept between calls
    """

    def __init__(
        self,
        config: ApiConfig,
        get_token: TokenGetter,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout
        self._get_token = get_token
        self._transport = transport

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def call(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        rid = secrets.token_hex(4)
        url = self.url_for(endpoint)

        token = await self._get_token()
        if not token:
            log.warning("api[%s] no auth token for %s", rid, endpoint)
            raise AuthError("Not signed in. Use /signin first.")

        merged = httpx.Headers(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            }
        )
        if headers:
            merged.update(headers)

        content = None
        if body is not None:
            content = body if isinstance(body, (str, bytes)) else json.dumps(body)

        log.debug("api[%s] %s %s token=%s", rid, method.upper(), url, _redact(token))
        started = perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                r = await client.request(method.upper(), url, headers=merged, content=content)
        except httpx.HTTPError as e:
            log.warning("api[%s] transport failure on %s: %s", rid, endpoint, e)
            raise TransportError(f"Could not reach the challenge service ({type(e).__name__}).") from e

        elapsed_ms = int((perf_counter() - started) * 1000)
        log.debug("api[%s] <- %s in %dms", rid, r.status_code, elapsed_ms)

        if r.status_code == 429:
            raise QuotaExceededError(_error_detail(r) or QUOTA_EXCEEDED)

        if not r.is_success:
            detail = _error_detail(r)
            log.warning("api[%s] %s failed (%s): %s", rid, endpoint, r.status_code, detail)
            raise ServerError(detail or GENERIC_ERROR, status_code=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            log.warning("api[%s] %s returned a non-JSON body", rid, endpoint)
            raise ServerError("Malformed response from server", status_code=r.status_code) from e
