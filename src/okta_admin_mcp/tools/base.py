"""Tool helpers."""

from __future__ import annotations

import time

from jsonschema import Draft202012Validator

from okta_admin_mcp.errors import InputValidationError
from okta_admin_mcp.mcp_runtime import ToolResult
from okta_admin_mcp.utils.serialization import dumps


def validate_payload(schema: dict[str, object], payload: object) -> list[str]:
    """Validate payload against schema and return error messages."""
    validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    messages: list[str] = []
    for error in errors:
        path = ".".join(str(p) for p in error.absolute_path)
        messages.append(f"{path}: {error.message}" if path else error.message)
    return messages


def validate_or_raise(schema: dict[str, object], payload: object) -> None:
    errors = validate_payload(schema, payload)
    if errors:
        raise InputValidationError(errors)


def result_from_payload(payload: dict[str, object]) -> ToolResult:
    text = dumps(payload, indent=2)
    content: list[dict[str, object]] = [{"type": "text", "text": text}]
    return ToolResult(content=content, structured_content=payload)


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.monotonic()`` reading."""
    return int((time.monotonic() - started) * 1000)
