"""Role policy models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    ANALYST = "analyst"
    HELPDESK = "helpdesk"
    ADMIN = "admin"


def _ensure_list(v: Any) -> list:
    """Convert None to empty list, pass through lists."""
    if v is None:
        return []
    return v


class RolePolicyConfig(BaseModel):
    """Allow lists as loaded from a role policy YAML file."""

    model_config = ConfigDict(extra="forbid")

    version: int = Field(default=1)
    roles: dict[Role, list[str]] = Field(default_factory=dict)

    @field_validator("roles", mode="before")
    @classmethod
    def _validate_roles(cls, v: Any) -> dict:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: _ensure_list(val) for k, val in v.items()}
        return v

    @classmethod
    def from_yaml(cls, data: dict[str, object]) -> "RolePolicyConfig":
        return cls.model_validate(data)
