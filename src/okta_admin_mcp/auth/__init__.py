"""Invocation context for tool calls."""

from okta_admin_mcp.auth.context import (
    InvocationContext,
    get_invocation_context_optional,
    new_correlation_id,
    reset_invocation_context,
    set_invocation_context,
)

__all__ = [
    "InvocationContext",
    "get_invocation_context_optional",
    "new_correlation_id",
    "reset_invocation_context",
    "set_invocation_context",
]
