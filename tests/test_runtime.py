from __future__ import annotations

import inspect
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError
from pydantic import BaseModel, ConfigDict

from okta_admin_mcp.auth.context import get_invocation_context_optional
from okta_admin_mcp.mcp_runtime import MCPServer, ToolResult, ToolSpec, _is_awaitable, request_meta
from okta_admin_mcp.tools import build_catalog, register_tools


class _Meta(BaseModel):
    model_config = ConfigDict(extra="allow")

    progressToken: str | None = None


def _context_with_meta(meta: object) -> SimpleNamespace:
    return SimpleNamespace(request_context=SimpleNamespace(meta=meta))


def test_request_meta_outside_request() -> None:
    with patch("okta_admin_mcp.mcp_runtime.get_context", side_effect=RuntimeError("no ctx")):
        assert request_meta() == {}


def test_request_meta_from_pydantic_model() -> None:
    meta = _Meta(caller="alice", callerRole="admin")

    with patch("okta_admin_mcp.mcp_runtime.get_context", return_value=_context_with_meta(meta)):
        assert request_meta() == {"caller": "alice", "callerRole": "admin"}


def test_request_meta_from_mapping_and_none() -> None:
    with patch(
        "okta_admin_mcp.mcp_runtime.get_context",
        return_value=_context_with_meta({"correlationId": "c-1"}),
    ):
        assert request_meta() == {"correlationId": "c-1"}
    with patch("okta_admin_mcp.mcp_runtime.get_context", return_value=_context_with_meta(None)):
        assert request_meta() == {}


def test_invocation_context_applies_defaults() -> None:
    with patch("okta_admin_mcp.mcp_runtime.FastMCP"):
        server = MCPServer("okta-mcp", "1.0", "ins", default_caller="svc", default_role="helpdesk")

    ctx = server.invocation_context({"callerRole": "admin"})

    assert ctx.caller == "svc"
    assert ctx.caller_role == "admin"
    assert ctx.correlation_id


@pytest.mark.asyncio
@patch("okta_admin_mcp.mcp_runtime.FastToolResult")
@patch("okta_admin_mcp.mcp_runtime.FunctionTool")
@patch("okta_admin_mcp.mcp_runtime.FastMCP")
async def test_add_tool_wraps_handler(mock_fastmcp, mock_function_tool, mock_result) -> None:
    seen = {}

    async def handler(payload: dict[str, object]) -> ToolResult:
        seen["payload"] = payload
        seen["context"] = get_invocation_context_optional()
        return ToolResult(
            content=[{"type": "text", "text": "ok"}], structured_content={"ok": True}
        )

    schema = {
        "type": "object",
        "properties": {"userId": {"type": "string"}, "confirm": {"type": "boolean"}},
    }
    fast_tool = MagicMock()
    mock_function_tool.from_function.return_value = fast_tool

    server = MCPServer("okta-mcp", "1.0", "ins")
    server.add_tool(ToolSpec("suspend_user_confirm", "desc", schema, handler))

    wrapped = mock_function_tool.from_function.call_args.args[0]
    assert mock_function_tool.from_function.call_args.kwargs["name"] == "suspend_user_confirm"
    assert list(inspect.signature(wrapped).parameters) == ["userId", "confirm"]
    mock_fastmcp.return_value.add_tool.assert_called_once_with(fast_tool)

    meta = {"caller": "bob", "callerRole": "admin", "correlationId": "c-9"}
    with patch("okta_admin_mcp.mcp_runtime.request_meta", return_value=meta):
        await wrapped(userId="00u1", confirm=None)

    assert seen["payload"] == {"userId": "00u1"}
    assert seen["context"].caller == "bob"
    assert seen["context"].correlation_id == "c-9"
    assert get_invocation_context_optional() is None
    kwargs = mock_result.call_args.kwargs
    assert kwargs["structured_content"] == {"ok": True}
    assert kwargs["content"][0].text == "ok"


@pytest.mark.asyncio
@patch("okta_admin_mcp.mcp_runtime.FunctionTool")
@patch("okta_admin_mcp.mcp_runtime.FastMCP")
async def test_add_tool_rejects_non_tool_result(_mock_fastmcp, mock_function_tool) -> None:
    server = MCPServer("okta-mcp", "1.0", "ins")
    server.add_tool(ToolSpec("t1", "desc", {"properties": {}}, lambda payload: {"raw": 1}))
    wrapped = mock_function_tool.from_function.call_args.args[0]

    with patch("okta_admin_mcp.mcp_runtime.request_meta", return_value={}):
        with pytest.raises(TypeError, match="did not return ToolResult"):
            await wrapped()
    assert get_invocation_context_optional() is None


@patch("okta_admin_mcp.mcp_runtime.FastMCP")
def test_run_transports(mock_fastmcp) -> None:
    server = MCPServer("okta-mcp", "1.0", "ins")

    server.run()
    mock_fastmcp.return_value.run.assert_called_with()

    server.run(transport="http", host="127.0.0.1", port=8080)
    mock_fastmcp.return_value.run.assert_called_with(
        transport="http", host="127.0.0.1", port=8080
    )


def test_is_awaitable() -> None:
    async def coro() -> None:
        return None

    pending = coro()
    assert _is_awaitable(pending)
    pending.close()
    assert not _is_awaitable(1)


def _catalog_server(okta, guard, recorder, role: str) -> MCPServer:
    server = MCPServer("okta-mcp", "1.0", "ins", default_caller="ada", default_role=role)
    register_tools(server, build_catalog(okta.client(), guard=guard, recorder=recorder))
    return server


@pytest.mark.asyncio
async def test_catalog_tools_over_fastmcp_client(okta, guard, recorder, audit_sink) -> None:
    okta.add("POST", "/users/00u1/lifecycle/suspend")
    server = _catalog_server(okta, guard, recorder, "admin")

    async with Client(server._server) as client:
        tools = {tool.name: tool for tool in await client.list_tools()}
        result = await client.call_tool(
            "suspend_user_confirm", {"userId": "00u1", "confirm": True}
        )
        with pytest.raises(ToolError, match="'confirm' is a required property"):
            await client.call_tool("suspend_user_confirm", {"userId": "00u1"})

    assert len(tools) == 21
    assert tools["suspend_user_confirm"].inputSchema["required"] == ["userId", "confirm"]
    assert result.structured_content == {"ok": True, "message": "User 00u1 suspended successfully"}
    assert len(okta.api_requests) == 1
    assert audit_sink.records[0]["ok"] is True
    assert audit_sink.records[0]["caller"] == "ada"


@pytest.mark.asyncio
async def test_catalog_tools_over_fastmcp_client_deny_analyst(
    okta, guard, recorder, audit_sink
) -> None:
    server = _catalog_server(okta, guard, recorder, "analyst")

    async with Client(server._server) as client:
        with pytest.raises(ToolError, match="Role 'analyst' is not allowed"):
            await client.call_tool("suspend_user_confirm", {"userId": "00u1", "confirm": True})

    assert okta.api_requests == []
    (record,) = audit_sink.records
    assert record["tool"] == "suspend_user"
    assert record["ok"] is False
    assert record["role"] == "analyst"
