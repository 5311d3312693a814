"""Async Okta Management API client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from okta_admin_mcp.config import OktaSettings
from okta_admin_mcp.errors import UpstreamError
from okta_admin_mcp.okta.oauth import ClientCredentialsTokenProvider, TokenCache

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-okta-request-id"


@dataclass
class OktaResponse:
    data: object
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int = 200

    @property
    def request_id(self) -> str | None:
        return self.headers.get(REQUEST_ID_HEADER)

    @property
    def link(self) -> str | None:
        return self.headers.get("link")


def _drop_none(params: Mapping[str, object] | None) -> dict[str, object] | None:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


def _upstream_error(exc: httpx.HTTPStatusError) -> UpstreamError:
    response = exc.response
    summary: str | None = None
    code: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        summary = body.get("errorSummary") if isinstance(body.get("errorSummary"), str) else None
        code = body.get("errorCode") if isinstance(body.get("errorCode"), str) else None
    message = summary or f"Okta API request failed with HTTP {response.status_code}"
    return UpstreamError(
        message,
        status_code=response.status_code,
        code=code,
        request_id=response.headers.get(REQUEST_ID_HEADER),
    )


class OktaClient:
    """Bearer-authenticated accessor for ``https://<domain>/api/v1``."""

    def __init__(
        self,
        base_url: str,
        token_provider: ClientCredentialsTokenProvider,
        *,
        timeout_seconds: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: OktaSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OktaClient":
        provider = ClientCredentialsTokenProvider(
            settings.token_url,
            settings.client_id,
            settings.client_secret,
            settings.scopes,
            cache=TokenCache(settings.token_refresh_margin_seconds),
            timeout_seconds=settings.token_timeout_seconds,
            transport=transport,
        )
        return cls(
            settings.base_url,
            provider,
            timeout_seconds=settings.request_timeout_seconds,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, object] | None = None,
        json: object = None,
    ) -> OktaResponse:
        token = await self.token_provider.get_token()
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.request(
                    method,
                    url,
                    params=_drop_none(params),
                    json=json,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/json",
                    },
                    timeout=self._timeout_seconds,
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = _upstream_error(exc)
            logger.error(
                "Okta API request failed: method=%s path=%s status=%s message=%s",
                method,
                path,
                error.status_code,
                error,
            )
            raise error from exc
        except httpx.HTTPError as exc:
            logger.error("Okta API request failed: method=%s path=%s error=%s", method, path, exc)
            raise UpstreamError(
                f"Okta API request failed: {exc}",
                code="network_error",
            ) from exc

        logger.debug(
            "Okta API request successful: method=%s path=%s status=%s",
            method,
            path,
            resp.status_code,
        )
        data: object = None
        if resp.content:
            try:
                data = resp.json()
            except ValueError:
                data = resp.text
        return OktaResponse(data=data, headers=resp.headers, status_code=resp.status_code)

    async def get(self, path: str, *, params: Mapping[str, object] | None = None) -> OktaResponse:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        *,
        params: Mapping[str, object] | None = None,
        json: object = None,
    ) -> OktaResponse:
        return await self.request("POST", path, params=params, json=json)

    async def put(
        self,
        path: str,
        *,
        params: Mapping[str, object] | None = None,
        json: object = None,
    ) -> OktaResponse:
        return await self.request("PUT", path, params=params, json=json)

    async def delete(
        self, path: str, *, params: Mapping[str, object] | None = None
    ) -> OktaResponse:
        return await self.request("DELETE", path, params=params)
