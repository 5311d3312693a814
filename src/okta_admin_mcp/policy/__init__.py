"""Role-based access policy."""

from okta_admin_mcp.policy.guard import AccessGuard, ensure_allowed, policy_operation_name
from okta_admin_mcp.policy.models import Role
from okta_admin_mcp.policy.roles import DEFAULT_ROLE, RolePolicy, get_default_policy

__all__ = [
    "AccessGuard",
    "DEFAULT_ROLE",
    "Role",
    "RolePolicy",
    "ensure_allowed",
    "get_default_policy",
    "policy_operation_name",
]
