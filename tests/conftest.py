from __future__ import annotations

import asyncio
import contextlib
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from okta_admin_mcp import logging_utils
from okta_admin_mcp.app import get_app_context
from okta_admin_mcp.audit.recorder import AuditRecorder
from okta_admin_mcp.config import _load_settings_cached
from okta_admin_mcp.okta.client import OktaClient
from okta_admin_mcp.okta.oauth import ClientCredentialsTokenProvider
from okta_admin_mcp.policy.guard import AccessGuard
from okta_admin_mcp.policy.roles import RolePolicy

OKTA_DOMAIN = "example.okta.com"
TOKEN_URL = f"https://{OKTA_DOMAIN}/oauth2/v1/token"
BASE_URL = f"https://{OKTA_DOMAIN}/api/v1"
API_PREFIX = "/api/v1"

Route = Callable[[httpx.Request], httpx.Response]


class OktaStub:
    """In-memory Okta org answering through ``httpx.MockTransport``.

    Routes are keyed by method and the path below ``/api/v1``. Unrouted
    calls get Okta's standard 404 body.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.api_requests: list[httpx.Request] = []
        self.token_requests: list[httpx.Request] = []
        self.token_status = 200
        self.transport = httpx.MockTransport(self.handle)

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def _route(_request: httpx.Request) -> httpx.Response:
            if json_body is None:
                return httpx.Response(status, headers=headers)
            return httpx.Response(status, json=json_body, headers=headers)

        self.routes[(method.upper(), path)] = _route

    def handle(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            self.token_requests.append(request)
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(
                200,
                json={"access_token": "test-token", "expires_in": 3600, "token_type": "Bearer"},
            )
        self.api_requests.append(request)
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(
                404,
                json={"errorCode": "E0000007", "errorSummary": "Not found: Resource not found"},
            )
        return route(request)

    def client(self) -> OktaClient:
        provider = ClientCredentialsTokenProvider(
            TOKEN_URL,
            "client-id",
            "client-secret",
            ["okta.users.read", "okta.users.manage"],
            transport=self.transport,
        )
        return OktaClient(BASE_URL, provider, transport=self.transport)


class RecordingSink:
    """Logger stand-in that keeps every emitted audit payload."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []
        self.messages: list[str] = []

    def info(self, msg: str, *args: object, extra: dict[str, Any] | None = None) -> None:
        self.messages.append(msg % args)
        if extra and "audit" in extra:
            self.records.append(extra["audit"])

    def parsed_messages(self) -> list[dict[str, Any]]:
        return [json.loads(message.split(" ", 1)[1]) for message in self.messages]


@pytest.fixture
def okta() -> OktaStub:
    return OktaStub()


@pytest.fixture
def policy() -> RolePolicy:
    return RolePolicy()


@pytest.fixture
def guard(policy: RolePolicy) -> AccessGuard:
    return AccessGuard(policy)


@pytest.fixture
def audit_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def recorder(policy: RolePolicy, audit_sink: RecordingSink) -> AuditRecorder:
    return AuditRecorder(policy, sink=audit_sink)  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's .env and real logging setup out of unit tests.
    monkeypatch.setattr("okta_admin_mcp.config.load_dotenv", lambda **_: False)
    monkeypatch.setattr(logging_utils, "_logging_configured", True)
    _load_settings_cached.cache_clear()
    get_app_context.cache_clear()
    yield
    _load_settings_cached.cache_clear()
    get_app_context.cache_clear()


@pytest.fixture
def okta_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OKTA_DOMAIN", OKTA_DOMAIN)
    monkeypatch.setenv("OKTA_OAUTH_TOKEN_URL", TOKEN_URL)
    monkeypatch.setenv("OKTA_CLIENT_ID", "client-id")
    monkeypatch.setenv("OKTA_CLIENT_SECRET", "client-secret")


@pytest.fixture(autouse=True)
def _close_default_event_loop() -> None:
    yield
    policy = asyncio.get_event_loop_policy()
    local = getattr(policy, "_local", None)
    loop = getattr(local, "_loop", None) if local is not None else None
    if loop is not None and not loop.is_running() and not loop.is_closed():
        with contextlib.suppress(Exception):
            loop.close()
    if loop is not None:
        with contextlib.suppress(Exception):
            policy.set_event_loop(None)
