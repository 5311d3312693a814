from __future__ import annotations

import json

import httpx
import pytest

from okta_admin_mcp.config import OktaSettings
from okta_admin_mcp.errors import TokenAcquisitionError, UpstreamError
from okta_admin_mcp.okta.client import OktaClient


class TestOktaClient:
    @pytest.mark.asyncio
    async def test_get_sends_bearer_token_and_drops_none_params(self, okta) -> None:
        okta.add(
            "GET",
            "/groups",
            json_body=[{"id": "00g1"}],
            headers={"x-okta-request-id": "req-1", "link": '<x?after=a>; rel="next"'},
        )

        response = await okta.client().get("/groups", params={"q": "eng", "after": None})

        assert response.data == [{"id": "00g1"}]
        assert response.request_id == "req-1"
        assert response.link == '<x?after=a>; rel="next"'
        (request,) = okta.api_requests
        assert request.headers["authorization"] == "Bearer test-token"
        assert request.headers["accept"] == "application/json"
        assert request.url.path == "/api/v1/groups"
        assert dict(request.url.params) == {"q": "eng"}

    @pytest.mark.asyncio
    async def test_token_is_fetched_once_across_requests(self, okta) -> None:
        okta.add("GET", "/apps", json_body=[])
        client = okta.client()

        await client.get("/apps")
        await client.get("/apps")

        assert len(okta.token_requests) == 1
        assert len(okta.api_requests) == 2

    @pytest.mark.asyncio
    async def test_empty_body_yields_none(self, okta) -> None:
        okta.add("POST", "/users/00u1/lifecycle/suspend", headers={"x-okta-request-id": "r"})

        response = await okta.client().post("/users/00u1/lifecycle/suspend")

        assert response.data is None
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_put_and_delete(self, okta) -> None:
        okta.add("PUT", "/groups/00g1/users/00u1", status=204)
        okta.add("DELETE", "/groups/00g1/users/00u1", status=204)
        client = okta.client()

        await client.put("/groups/00g1/users/00u1")
        await client.delete("/groups/00g1/users/00u1")

        assert [r.method for r in okta.api_requests] == ["PUT", "DELETE"]

    @pytest.mark.asyncio
    async def test_post_json_body(self, okta) -> None:
        okta.add("POST", "/things", json_body={"ok": True})

        await okta.client().post("/things", json={"a": 1})

        assert json.loads(okta.api_requests[0].content) == {"a": 1}

    @pytest.mark.asyncio
    async def test_http_error_maps_okta_error_body(self, okta) -> None:
        okta.add(
            "GET",
            "/users",
            status=400,
            json_body={"errorCode": "E0000031", "errorSummary": "Invalid search criteria."},
            headers={"x-okta-request-id": "req-err"},
        )

        with pytest.raises(UpstreamError) as excinfo:
            await okta.client().get("/users")

        error = excinfo.value
        assert str(error) == "Invalid search criteria."
        assert error.status_code == 400
        assert error.code == "E0000031"
        assert error.request_id == "req-err"

    @pytest.mark.asyncio
    async def test_http_error_without_okta_body(self, okta) -> None:
        def _route(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        okta.routes[("GET", "/logs")] = _route

        with pytest.raises(UpstreamError, match="HTTP 502") as excinfo:
            await okta.client().get("/logs")
        assert excinfo.value.code is None

    @pytest.mark.asyncio
    async def test_network_error(self, okta) -> None:
        def _route(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        okta.routes[("GET", "/logs")] = _route

        with pytest.raises(UpstreamError) as excinfo:
            await okta.client().get("/logs")
        assert excinfo.value.code == "network_error"

    @pytest.mark.asyncio
    async def test_token_failure_prevents_api_call(self, okta) -> None:
        okta.token_status = 401

        with pytest.raises(TokenAcquisitionError):
            await okta.client().get("/users")
        assert okta.api_requests == []

    def test_from_settings(self) -> None:
        settings = OktaSettings(
            domain="acme.okta.com",
            token_url="https://acme.okta.com/oauth2/v1/token",
            client_id="cid",
            client_secret="secret",
            token_refresh_margin_seconds=60,
        )

        client = OktaClient.from_settings(settings, transport=httpx.MockTransport(lambda r: None))

        assert client.base_url == "https://acme.okta.com/api/v1"
        assert client.token_provider.cache._refresh_margin_seconds == 60
