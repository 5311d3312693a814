"""Per-call role enforcement."""

from __future__ import annotations

from okta_admin_mcp.auth.context import InvocationContext
from okta_admin_mcp.errors import AuthorizationError
from okta_admin_mcp.policy.models import Role
from okta_admin_mcp.policy.roles import RolePolicy, get_default_policy

CONFIRM_SUFFIX = "_confirm"


def policy_operation_name(operation_name: str) -> str:
    """Map a tool name onto the name used in allow lists.

    Execute variants of destructive actions are listed under the action
    name, so ``suspend_user_confirm`` is checked as ``suspend_user``.
    """
    if operation_name.endswith(CONFIRM_SUFFIX) and len(operation_name) > len(CONFIRM_SUFFIX):
        return operation_name[: -len(CONFIRM_SUFFIX)]
    return operation_name


class AccessGuard:
    """Raises ``AuthorizationError`` when the caller's role lacks a tool."""

    def __init__(self, policy: RolePolicy) -> None:
        self.policy = policy

    def ensure_allowed(self, operation_name: str, context: InvocationContext | None) -> Role:
        role = self.policy.resolve_role(context.caller_role if context else None)
        allowed = self.policy.allowed_operations(role)
        if policy_operation_name(operation_name) not in allowed:
            raise AuthorizationError(role.value, operation_name, allowed)
        return role


def ensure_allowed(
    operation_name: str,
    context: InvocationContext | None,
    policy: RolePolicy | None = None,
) -> Role:
    return AccessGuard(policy or get_default_policy()).ensure_allowed(operation_name, context)
