"""Tool registration helpers.

The catalog holds the read tools plus a preview/confirm pair for every
destructive admin action:
- get_user_by_email, search_users, list_groups, list_apps, system_log
- suspend_user, unsuspend_user, clear_user_sessions, deactivate_user,
  reactivate_user, add_user_to_group, remove_user_from_group, reset_password
  (each with a matching ``*_confirm`` tool)
"""

from __future__ import annotations

from okta_admin_mcp.audit.recorder import AuditRecorder
from okta_admin_mcp.logging_utils import get_logger
from okta_admin_mcp.mcp_runtime import MCPServer, ToolSpec
from okta_admin_mcp.okta.client import OktaClient
from okta_admin_mcp.policy.guard import AccessGuard
from okta_admin_mcp.tools.admin_tools import build_admin_operations
from okta_admin_mcp.tools.catalog import Operation, OperationCatalog
from okta_admin_mcp.tools.read_tools import build_read_operations

__all__ = [
    "Operation",
    "OperationCatalog",
    "build_catalog",
    "get_tool_registry",
    "get_tool_specs",
    "register_tools",
]


def build_catalog(
    client: OktaClient,
    *,
    guard: AccessGuard,
    recorder: AuditRecorder,
) -> OperationCatalog:
    catalog = OperationCatalog()
    for operation in build_read_operations(client, guard=guard, recorder=recorder):
        catalog.register(operation)
    for operation in build_admin_operations(client, guard=guard, recorder=recorder):
        catalog.register(operation)
    return catalog


def get_tool_specs(catalog: OperationCatalog) -> list[ToolSpec]:
    return catalog.tool_specs()


def get_tool_registry(catalog: OperationCatalog) -> dict[str, ToolSpec]:
    return {tool.name: tool for tool in get_tool_specs(catalog)}


def register_tools(server: MCPServer, catalog: OperationCatalog) -> None:
    """Register every catalog operation with the MCP server."""
    logger = get_logger(__name__)
    logger.info("Registering Okta admin tools")

    for tool in get_tool_specs(catalog):
        server.add_tool(tool)

    logger.info(
        "Registered %d tools (%d destructive)",
        len(catalog),
        len(catalog.destructive_names()),
    )
