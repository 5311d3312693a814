"""OAuth client-credentials token acquisition with a process-wide cache."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import httpx

from okta_admin_mcp.errors import TokenAcquisitionError
from okta_admin_mcp.utils.time import epoch_seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at: int

    def __repr__(self) -> str:
        return f"CachedToken(access_token=***, expires_at={self.expires_at})"


class TokenCache:
    """Single-entry token cache.

    Callers pass the current time explicitly. There is no lock: concurrent
    refreshes may both fetch a token and the later one wins.
    """

    def __init__(self, refresh_margin_seconds: int = 30) -> None:
        self._refresh_margin_seconds = refresh_margin_seconds
        self._entry: CachedToken | None = None

    @property
    def entry(self) -> CachedToken | None:
        return self._entry

    def get(self, now: float) -> str | None:
        entry = self._entry
        if entry is not None and now < entry.expires_at - self._refresh_margin_seconds:
            return entry.access_token
        return None

    def store(self, access_token: str, expires_in: int, now: float) -> CachedToken:
        self._entry = CachedToken(access_token=access_token, expires_at=int(now) + int(expires_in))
        return self._entry

    def clear(self) -> None:
        self._entry = None


class ClientCredentialsTokenProvider:
    """Fetch Okta API access tokens with the client-credentials grant."""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str],
        *,
        cache: TokenCache | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = epoch_seconds,
    ) -> None:
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._scopes = tuple(scopes)
        self.cache = cache or TokenCache()
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._clock = clock

    async def get_token(self) -> str:
        cached = self.cache.get(self._clock())
        if cached is not None:
            return cached

        logger.info("Fetching new Okta OAuth token")
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(
                    self._token_url,
                    data={
                        "grant_type": "client_credentials",
                        "scope": " ".join(self._scopes),
                    },
                    auth=(self._client_id, self._client_secret),
                    timeout=self._timeout_seconds,
                )
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Failed to obtain Okta OAuth token: status=%s", exc.response.status_code)
            raise TokenAcquisitionError(
                f"OAuth token request failed: HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
                code="token_error",
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to obtain Okta OAuth token: %s", exc)
            raise TokenAcquisitionError(
                f"OAuth token request failed: {exc}",
                code="token_error",
            ) from exc

        access_token = body.get("access_token") if isinstance(body, dict) else None
        expires_in = body.get("expires_in") if isinstance(body, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise TokenAcquisitionError(
                "OAuth token request failed: response has no access_token",
                code="token_error",
            )
        try:
            lifetime = int(expires_in)
        except (TypeError, ValueError) as exc:
            raise TokenAcquisitionError(
                "OAuth token request failed: response has no valid expires_in",
                code="token_error",
            ) from exc

        self.cache.store(access_token, lifetime, self._clock())
        logger.info("Successfully obtained Okta OAuth token")
        return access_token
