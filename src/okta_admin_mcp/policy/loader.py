"""Loader for role policy YAML files."""

from __future__ import annotations

from pathlib import Path

import yaml

from okta_admin_mcp.policy.models import RolePolicyConfig


def load_role_policy(path: str) -> RolePolicyConfig:
    policy_path = Path(path)
    if not policy_path.exists():
        raise FileNotFoundError(f"Role policy file not found: {policy_path}")
    with policy_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return RolePolicyConfig.from_yaml(data)
