"""Request-scoped invocation context."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from contextvars import ContextVar, Token
from dataclasses import dataclass

UNKNOWN_CALLER = "unknown"


def new_correlation_id() -> str:
    return str(uuid.uuid4())


def _clean(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class InvocationContext:
    """Caller identity carried by one tool invocation.

    ``caller_role`` is kept as the raw string the client sent; the role
    policy decides what it resolves to.
    """

    correlation_id: str | None = None
    caller: str | None = None
    caller_role: str | None = None

    @property
    def caller_or_unknown(self) -> str:
        return self.caller or UNKNOWN_CALLER

    def with_correlation_id(self) -> "InvocationContext":
        """Return a context that is guaranteed to carry a correlation id."""
        if self.correlation_id:
            return self
        return InvocationContext(
            correlation_id=new_correlation_id(),
            caller=self.caller,
            caller_role=self.caller_role,
        )

    @classmethod
    def from_meta(
        cls,
        meta: Mapping[str, object] | None,
        *,
        default_caller: str | None = None,
        default_role: str | None = None,
    ) -> "InvocationContext":
        """Build a context from MCP request ``_meta`` fields.

        Recognises ``correlationId``, ``caller`` and ``callerRole``. A
        correlation id is generated when the request carries none.
        """
        meta = meta or {}
        return cls(
            correlation_id=_clean(meta.get("correlationId")) or new_correlation_id(),
            caller=_clean(meta.get("caller")) or _clean(default_caller),
            caller_role=_clean(meta.get("callerRole")) or _clean(default_role),
        )


_invocation_context: ContextVar[InvocationContext | None] = ContextVar(
    "invocation_context",
    default=None,
)


def set_invocation_context(ctx: InvocationContext) -> Token[InvocationContext | None]:
    """Set context and return reset token."""
    return _invocation_context.set(ctx)


def reset_invocation_context(token: Token[InvocationContext | None]) -> None:
    """Reset context using token from set_invocation_context()."""
    _invocation_context.reset(token)


def get_invocation_context_optional() -> InvocationContext | None:
    return _invocation_context.get()
