"""Data models for audit records."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuditError:
    message: str
    code: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"message": self.message}
        if self.code is not None:
            payload["code"] = self.code
        return payload


@dataclass(frozen=True)
class AuditRecord:
    timestamp: str
    correlation_id: str
    tool: str
    caller: str
    role: str
    inputs: object
    ok: bool
    result: object | None = None
    error: AuditError | None = None
    okta_request_id: str | None = None
    duration: int | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "timestamp": self.timestamp,
            "correlationId": self.correlation_id,
            "tool": self.tool,
            "caller": self.caller,
            "role": self.role,
            "inputs": self.inputs,
            "ok": self.ok,
        }
        if self.result is not None:
            payload["result"] = self.result
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        if self.okta_request_id is not None:
            payload["oktaRequestId"] = self.okta_request_id
        if self.duration is not None:
            payload["duration"] = self.duration
        return payload
