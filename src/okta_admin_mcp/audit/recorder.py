"""Structured audit emission for tool invocations."""

from __future__ import annotations

import logging

from okta_admin_mcp.audit.models import AuditError, AuditRecord
from okta_admin_mcp.auth.context import InvocationContext, new_correlation_id
from okta_admin_mcp.logging_utils import AUDIT_LOGGER_NAME
from okta_admin_mcp.policy.roles import RolePolicy, get_default_policy
from okta_admin_mcp.utils.masking import redact_inputs, redact_result
from okta_admin_mcp.utils.serialization import dumps
from okta_admin_mcp.utils.time import utc_now_iso

logger = logging.getLogger(__name__)


def _error_code(error: BaseException) -> str | None:
    code = getattr(error, "code", None)
    if code is None:
        return None
    return str(code)


class AuditRecorder:
    """Emit one audit record per tool invocation.

    Records go to the ``okta_admin_mcp.audit`` logger as a JSON line; the
    record dict is also attached to the log record as ``audit``. Emission
    failures are logged and never raised into the caller.
    """

    def __init__(
        self,
        policy: RolePolicy | None = None,
        *,
        enabled: bool = True,
        sink: logging.Logger | None = None,
    ) -> None:
        self._policy = policy or get_default_policy()
        self._enabled = enabled
        self._sink = sink or logging.getLogger(AUDIT_LOGGER_NAME)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def build_record(
        self,
        tool: str,
        inputs: object,
        result: object,
        context: InvocationContext | None,
        error: BaseException | None = None,
        okta_request_id: str | None = None,
        duration_ms: int | None = None,
    ) -> AuditRecord:
        context = context or InvocationContext()
        role = self._policy.resolve_role(context.caller_role)
        return AuditRecord(
            timestamp=utc_now_iso(),
            correlation_id=context.correlation_id or new_correlation_id(),
            tool=tool,
            caller=context.caller_or_unknown,
            role=role.value,
            inputs=redact_inputs(inputs),
            ok=error is None,
            result=redact_result(result) if result else None,
            error=AuditError(str(error), _error_code(error)) if error is not None else None,
            okta_request_id=okta_request_id,
            duration=duration_ms,
        )

    def audit(
        self,
        tool: str,
        inputs: object,
        result: object,
        context: InvocationContext | None,
        error: BaseException | None = None,
        okta_request_id: str | None = None,
        duration_ms: int | None = None,
    ) -> AuditRecord | None:
        if not self._enabled:
            return None
        try:
            record = self.build_record(
                tool,
                inputs,
                result,
                context,
                error=error,
                okta_request_id=okta_request_id,
                duration_ms=duration_ms,
            )
            payload = record.to_dict()
            self._sink.info("audit %s", dumps(payload), extra={"audit": payload})
        except Exception as exc:
            logger.warning("Failed to emit audit record for %s: %s", tool, exc)
            return None
        return record
