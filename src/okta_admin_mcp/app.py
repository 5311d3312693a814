"""Application context assembly."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import yaml
from pydantic import ValidationError

from okta_admin_mcp.audit.recorder import AuditRecorder
from okta_admin_mcp.config import Settings, load_settings
from okta_admin_mcp.errors import ConfigurationError
from okta_admin_mcp.okta.client import OktaClient
from okta_admin_mcp.policy.guard import AccessGuard
from okta_admin_mcp.policy.loader import load_role_policy
from okta_admin_mcp.policy.roles import RolePolicy
from okta_admin_mcp.tools import build_catalog
from okta_admin_mcp.tools.catalog import OperationCatalog


@dataclass
class AppContext:
    """Application-wide dependency container.

    Built once at startup; the policy and catalog are immutable afterwards.
    """

    settings: Settings
    policy: RolePolicy
    guard: AccessGuard
    recorder: AuditRecorder
    client: OktaClient
    catalog: OperationCatalog


def load_policy(settings: Settings) -> RolePolicy:
    if not settings.policy.path:
        return RolePolicy()
    try:
        config = load_role_policy(settings.policy.path)
    except (OSError, ValidationError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid role policy: {exc}") from exc
    return RolePolicy.from_config(config)


def create_app_context(settings: Settings, client: OktaClient | None = None) -> AppContext:
    """Wire policy, guard, recorder, client and catalog together."""
    policy = load_policy(settings)
    guard = AccessGuard(policy)
    recorder = AuditRecorder(policy, enabled=settings.audit.enabled)
    okta_client = client or OktaClient.from_settings(settings.okta)
    catalog = build_catalog(okta_client, guard=guard, recorder=recorder)
    policy.validate_against(catalog.names())
    return AppContext(
        settings=settings,
        policy=policy,
        guard=guard,
        recorder=recorder,
        client=okta_client,
        catalog=catalog,
    )


@lru_cache(maxsize=1)
def get_app_context() -> AppContext:
    """Return the cached process-wide application context."""
    return create_app_context(load_settings())
