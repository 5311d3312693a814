"""Static role to tool allow lists."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache

from okta_admin_mcp.errors import ConfigurationError
from okta_admin_mcp.policy.models import Role, RolePolicyConfig

logger = logging.getLogger(__name__)

DEFAULT_ROLE = Role.ANALYST

_ROLE_VALUES = frozenset(role.value for role in Role)

_READ_TOOLS = (
    "get_user_by_email",
    "search_users",
    "list_groups",
    "list_apps",
    "system_log",
)

_HELPDESK_TOOLS = (
    "suspend_user",
    "unsuspend_user",
    "clear_user_sessions",
    "add_user_to_group",
    "remove_user_from_group",
    "reset_password",
)

_ADMIN_TOOLS = (
    "deactivate_user",
    "reactivate_user",
)

DEFAULT_ALLOW_LISTS: Mapping[Role, frozenset[str]] = {
    Role.ANALYST: frozenset(_READ_TOOLS),
    Role.HELPDESK: frozenset(_READ_TOOLS + _HELPDESK_TOOLS),
    Role.ADMIN: frozenset(_READ_TOOLS + _HELPDESK_TOOLS + _ADMIN_TOOLS),
}


class RolePolicy:
    """Immutable allow lists keyed by role.

    Unknown or missing roles never raise; they resolve to ``DEFAULT_ROLE``.
    """

    def __init__(self, allow_lists: Mapping[Role, Iterable[str]] | None = None) -> None:
        source = DEFAULT_ALLOW_LISTS if allow_lists is None else allow_lists
        self._allow_lists: dict[Role, frozenset[str]] = {
            role: frozenset(source.get(role, ())) for role in Role
        }

    @classmethod
    def from_config(cls, config: RolePolicyConfig) -> "RolePolicy":
        return cls(config.roles)

    @staticmethod
    def is_valid_role(role: object) -> bool:
        if isinstance(role, Role):
            return True
        return isinstance(role, str) and role in _ROLE_VALUES

    def resolve_role(self, role: object) -> Role:
        if isinstance(role, Role):
            return role
        if self.is_valid_role(role):
            return Role(role)
        return DEFAULT_ROLE

    def allowed_operations(self, role: object) -> frozenset[str]:
        return self._allow_lists[self.resolve_role(role)]

    def is_allowed(self, role: object, operation_name: str) -> bool:
        return operation_name in self.allowed_operations(role)

    def referenced_operations(self) -> frozenset[str]:
        names: set[str] = set()
        for allowed in self._allow_lists.values():
            names |= allowed
        return frozenset(names)

    def validate_against(self, operation_names: Iterable[str]) -> None:
        """Fail when an allow list names an operation that does not exist."""
        known = frozenset(operation_names)
        unknown = sorted(self.referenced_operations() - known)
        if unknown:
            raise ConfigurationError(
                "Role policy references unknown tools: " + ", ".join(unknown)
            )
        logger.debug("Role policy validated against %d tools", len(known))


@lru_cache(maxsize=1)
def get_default_policy() -> RolePolicy:
    return RolePolicy()
