"""Error types raised by the Okta admin tools."""

from __future__ import annotations

from collections.abc import Iterable


class OktaAdminError(Exception):
    """Base class for errors surfaced to tool callers."""

    default_code: str | None = None

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code


class InputValidationError(OktaAdminError, ValueError):
    """Raised when tool input does not match its schema."""

    default_code = "invalid_input"

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("Input validation failed: " + "; ".join(self.errors))


class AuthorizationError(OktaAdminError, PermissionError):
    """Raised when the caller's role may not use a tool."""

    default_code = "forbidden"

    def __init__(self, role: str, operation: str, allowed: Iterable[str]) -> None:
        self.role = role
        self.operation = operation
        self.allowed = sorted(allowed)
        super().__init__(
            f"Role '{role}' is not allowed to use tool '{operation}'. "
            f"Allowed tools for this role: {', '.join(self.allowed)}"
        )


class UpstreamError(OktaAdminError):
    """Raised when the Okta API or the network fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message, code)
        self.status_code = status_code
        self.request_id = request_id


class TokenAcquisitionError(UpstreamError):
    """Raised when the OAuth client-credentials exchange fails."""


class ConfigurationError(OktaAdminError, RuntimeError):
    """Raised when required startup configuration is missing or invalid."""

    default_code = "configuration_error"
