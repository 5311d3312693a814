"""Configuration management for the Okta admin MCP server."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from okta_admin_mcp.errors import ConfigurationError

_config_logger = logging.getLogger(__name__)

DEFAULT_SCOPES: tuple[str, ...] = (
    "okta.users.read",
    "okta.groups.read",
    "okta.apps.read",
    "okta.logs.read",
    "okta.users.manage",
    "okta.groups.manage",
    "okta.sessions.manage",
)


class OktaSettings(BaseModel):
    domain: str = Field(default="", description="Okta org domain, e.g. acme.okta.com")
    token_url: str = Field(default="", description="OAuth 2.0 token endpoint")
    client_id: str = Field(default="")
    client_secret: str = Field(default="", repr=False)
    scopes: tuple[str, ...] = Field(default=DEFAULT_SCOPES)
    request_timeout_seconds: float = Field(default=20.0, gt=0, le=300)
    token_timeout_seconds: float = Field(default=10.0, gt=0, le=300)
    token_refresh_margin_seconds: int = Field(default=30, ge=0, le=3600)

    @field_validator("domain")
    @classmethod
    def _strip_domain(cls, value: str) -> str:
        value = value.strip()
        for prefix in ("https://", "http://"):
            if value.lower().startswith(prefix):
                value = value[len(prefix):]
        return value.rstrip("/")

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}/api/v1"


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class AuditSettings(BaseModel):
    enabled: bool = Field(default=True)
    log_file: str | None = Field(default=None, description="Optional dedicated audit log file")


class PolicySettings(BaseModel):
    path: str | None = Field(default=None, description="Optional role policy YAML override")


class InvocationSettings(BaseModel):
    """Identity assumed for requests that carry no caller metadata."""

    default_caller: str | None = Field(default=None)
    default_role: str | None = Field(default=None)


class ServerSettings(BaseModel):
    name: str = Field(default="okta-mcp")
    instructions: str = Field(
        default=(
            "Use these tools to look up and administer Okta users, groups, apps and logs. "
            "Destructive actions require calling the matching *_confirm tool with confirm=true."
        )
    )
    transport_mode: Literal["stdio", "http"] = Field(default="stdio")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1024, le=65535)


class Settings(BaseModel):
    okta: OktaSettings = Field(default_factory=OktaSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)
    invocation: InvocationSettings = Field(default_factory=InvocationSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


REQUIRED_ENV_VARS: dict[str, str] = {
    "domain": "OKTA_DOMAIN",
    "token_url": "OKTA_OAUTH_TOKEN_URL",
    "client_id": "OKTA_CLIENT_ID",
    "client_secret": "OKTA_CLIENT_SECRET",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _split_scopes(value: str | None) -> tuple[str, ...]:
    if not value:
        return DEFAULT_SCOPES
    scopes = tuple(item for item in value.replace(",", " ").split() if item)
    return scopes or DEFAULT_SCOPES


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path)
    root = _project_root().resolve()
    if candidate.is_absolute():
        resolved = candidate.resolve()
    else:
        resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        raise ValueError(f"Path traversal detected: '{path}' resolves outside project root")
    return str(resolved)


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        _config_logger.warning(
            "Invalid float value for %s: %r, using default %s", key, value, default
        )
        return default


def _env_optional(key: str) -> str | None:
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = _env_optional("LOG_FILE")
    audit_file_env = _env_optional("AUDIT_LOG_FILE")
    policy_path_env = _env_optional("ROLE_POLICY_PATH")

    try:
        settings_data: dict[str, object] = {
            "okta": {
                "domain": os.getenv(REQUIRED_ENV_VARS["domain"], ""),
                "token_url": os.getenv(REQUIRED_ENV_VARS["token_url"], "").strip(),
                "client_id": os.getenv(REQUIRED_ENV_VARS["client_id"], "").strip(),
                "client_secret": os.getenv(REQUIRED_ENV_VARS["client_secret"], ""),
                "scopes": _split_scopes(os.getenv("OKTA_SCOPES")),
                "request_timeout_seconds": _env_float(
                    "OKTA_REQUEST_TIMEOUT_SECONDS",
                    OktaSettings().request_timeout_seconds,
                ),
                "token_timeout_seconds": _env_float(
                    "OKTA_TOKEN_TIMEOUT_SECONDS",
                    OktaSettings().token_timeout_seconds,
                ),
                "token_refresh_margin_seconds": _env_int(
                    "OKTA_TOKEN_REFRESH_MARGIN_SECONDS",
                    OktaSettings().token_refresh_margin_seconds,
                ),
            },
            "logging": {
                "level": os.getenv("LOG_LEVEL", LoggingSettings().level),
                "file": _resolve_path(log_file_env) if log_file_env else None,
            },
            "audit": {
                "enabled": _env_bool("AUDIT_ENABLED", AuditSettings().enabled),
                "log_file": _resolve_path(audit_file_env) if audit_file_env else None,
            },
            "policy": {
                "path": _resolve_path(policy_path_env) if policy_path_env else None,
            },
            "invocation": {
                "default_caller": _env_optional("MCP_DEFAULT_CALLER"),
                "default_role": _env_optional("MCP_DEFAULT_ROLE"),
            },
            "server": {
                "name": os.getenv("MCP_SERVER_NAME", ServerSettings().name),
                "instructions": os.getenv("MCP_INSTRUCTIONS", ServerSettings().instructions),
                "transport_mode": os.getenv("TRANSPORT_MODE", ServerSettings().transport_mode),
                "host": os.getenv("MCP_HOST", ServerSettings().host),
                "port": _env_int("MCP_PORT", ServerSettings().port),
            },
        }
        return Settings.model_validate(settings_data)
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def missing_okta_settings(settings: Settings) -> list[str]:
    """Return the environment variable names of unset Okta settings."""
    missing: list[str] = []
    for field_name, env_name in REQUIRED_ENV_VARS.items():
        value = getattr(settings.okta, field_name)
        if not isinstance(value, str) or not value.strip():
            missing.append(env_name)
    return missing


def require_okta_settings(settings: Settings) -> None:
    missing = missing_okta_settings(settings)
    if missing:
        raise ConfigurationError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )
