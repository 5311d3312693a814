"""FastMCP runtime adapter."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, cast

from fastmcp import FastMCP
from fastmcp.server.dependencies import get_context
from fastmcp.tools import FunctionTool
from fastmcp.tools.tool import ToolResult as FastToolResult
from mcp.types import TextContent
from pydantic import BaseModel

from okta_admin_mcp.auth.context import (
    InvocationContext,
    reset_invocation_context,
    set_invocation_context,
)

logger = logging.getLogger(__name__)


@dataclass
class ToolSpec:
    name: str
    description: str
    input_schema: dict[str, object]
    handler: Callable[[dict[str, object]], "ToolResult | Awaitable[ToolResult]"]


class ToolResult(BaseModel):
    content: list[dict[str, object]]
    structured_content: dict[str, object] | None = None


def request_meta() -> dict[str, object]:
    """Return the ``_meta`` object of the MCP request being served, if any."""
    try:
        meta = get_context().request_context.meta
    except (RuntimeError, LookupError, ValueError, AttributeError):
        return {}
    if meta is None:
        return {}
    if isinstance(meta, BaseModel):
        return meta.model_dump(exclude_none=True)
    if isinstance(meta, Mapping):
        return dict(meta)
    return {}


class MCPServer:
    """Registers ``ToolSpec`` handlers on a FastMCP server.

    Each call runs with an ``InvocationContext`` built from the request
    ``_meta`` and the configured fallback identity.
    """

    def __init__(
        self,
        name: str,
        version: str,
        instructions: str,
        *,
        default_caller: str | None = None,
        default_role: str | None = None,
    ) -> None:
        self._server: Any = FastMCP(name=name, version=version, instructions=instructions)
        self._default_caller = default_caller
        self._default_role = default_role

    def invocation_context(self, meta: Mapping[str, object] | None) -> InvocationContext:
        return InvocationContext.from_meta(
            meta,
            default_caller=self._default_caller,
            default_role=self._default_role,
        )

    def add_tool(self, tool: ToolSpec) -> None:
        # Build a closure-based handler with a synthetic signature so FastMCP
        # sees named parameters without resorting to exec()/eval().
        raw_properties = tool.input_schema.get("properties", {})
        properties = raw_properties if isinstance(raw_properties, dict) else {}
        prop_names = [name for name in properties.keys() if isinstance(name, str)]

        async def _handler(**kwargs: object) -> object:
            filtered = {k: v for k, v in kwargs.items() if v is not None}
            token = set_invocation_context(self.invocation_context(request_meta()))
            try:
                raw_result = tool.handler(filtered)
                if _is_awaitable(raw_result):
                    result = await cast(Awaitable[ToolResult], raw_result)
                else:
                    result = cast(ToolResult, raw_result)
            finally:
                reset_invocation_context(token)
            if not isinstance(result, ToolResult):
                raise TypeError("Tool handler did not return ToolResult")
            return FastToolResult(
                content=[TextContent(**item) for item in result.content],
                structured_content=result.structured_content,
            )

        params = [
            inspect.Parameter(name, inspect.Parameter.KEYWORD_ONLY, default=None, annotation=object)
            for name in prop_names
        ]
        _handler.__signature__ = inspect.Signature(params)  # type: ignore[attr-defined]
        _handler.__annotations__ = {name: object for name in prop_names}
        _handler.__name__ = f"_handler_{tool.name.replace('-', '_').replace('.', '_')}"

        fast_tool = FunctionTool.from_function(
            _handler,
            name=tool.name,
            description=tool.description,
        )
        # Advertise the real JSON schema instead of the synthetic signature.
        fields = getattr(fast_tool.__class__, "model_fields", None)
        if isinstance(fields, dict):
            for field_name in ("parameters", "input_schema"):
                if field_name in fields:
                    setattr(fast_tool, field_name, tool.input_schema)
        self._server.add_tool(fast_tool)

    def run(
        self, transport: str = "stdio", host: str | None = None, port: int | None = None
    ) -> None:
        if transport == "stdio":
            self._server.run()
            return
        self._server.run(transport=transport, host=host, port=port)


def _is_awaitable(value: object) -> bool:
    try:
        return inspect.isawaitable(value)
    except TypeError:
        return False
