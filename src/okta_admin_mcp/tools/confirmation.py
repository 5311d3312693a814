"""Two-step confirmation for destructive actions.

Every destructive action is published as two tools. ``<name>`` only
explains how to proceed. ``<name>_confirm`` requires ``confirm: true``,
enforces the role policy, runs the action and audits the outcome.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from okta_admin_mcp.audit.recorder import AuditRecorder
from okta_admin_mcp.auth.context import InvocationContext
from okta_admin_mcp.policy.guard import CONFIRM_SUFFIX, AccessGuard
from okta_admin_mcp.tools._schemas import confirm_schema, preview_schema
from okta_admin_mcp.tools.base import elapsed_ms, validate_or_raise
from okta_admin_mcp.tools.catalog import Operation


@dataclass(frozen=True)
class ActionResult:
    payload: dict[str, object]
    okta_request_id: str | None = None


Action = Callable[[dict[str, object]], Awaitable[ActionResult]]


def confirmation_message(name: str) -> str:
    return f"Call {name}{CONFIRM_SUFFIX} with {{ ...args, confirm: true }} to execute."


def build_confirmation_pair(
    name: str,
    schema: dict[str, object],
    action: Action,
    description: str,
    *,
    guard: AccessGuard,
    recorder: AuditRecorder,
) -> tuple[Operation, Operation]:
    execute_name = f"{name}{CONFIRM_SUFFIX}"
    execute_schema = confirm_schema(schema)

    async def _preview(
        payload: dict[str, object], context: InvocationContext
    ) -> dict[str, object]:
        return {"confirmationRequired": True, "message": confirmation_message(name)}

    async def _execute(
        payload: dict[str, object], context: InvocationContext
    ) -> dict[str, object]:
        validate_or_raise(execute_schema, payload)
        started = time.monotonic()
        try:
            guard.ensure_allowed(execute_name, context)
            outcome = await action(payload)
        except Exception as exc:
            recorder.audit(
                name,
                payload,
                None,
                context,
                error=exc,
                duration_ms=elapsed_ms(started),
            )
            raise
        recorder.audit(
            name,
            {**payload, "confirm": True},
            outcome.payload,
            context,
            okta_request_id=outcome.okta_request_id,
            duration_ms=elapsed_ms(started),
        )
        return outcome.payload

    preview = Operation(
        name=name,
        description=(
            f"Destructive action. First call '{name}' to get confirmation message; "
            f"then call '{execute_name}' with {{confirm:true}}."
        ),
        input_schema=preview_schema(schema),
        handler=_preview,
        destructive=True,
    )
    execute = Operation(
        name=execute_name,
        description=f"CONFIRMED execution of {description}",
        input_schema=execute_schema,
        handler=_execute,
        destructive=True,
    )
    return preview, execute
