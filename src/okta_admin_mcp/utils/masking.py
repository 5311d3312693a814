"""Sensitive-field redaction for audit payloads.

Only the top level of a mapping is inspected: the tool inputs and results
that reach the audit log are flat objects, and nested values are passed
through untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

REDACTION_MARKER = "[REDACTED]"

SENSITIVE_INPUT_FIELDS: frozenset[str] = frozenset({"password", "secret", "token", "key"})
SENSITIVE_RESULT_FIELDS: frozenset[str] = frozenset({"tempPassword", "secret", "token"})


def redact_top_level(
    value: object,
    fields: Iterable[str],
    *,
    mask: str = REDACTION_MARKER,
) -> object:
    """Return a shallow copy of *value* with the named keys masked.

    Keys are matched exactly. Values that are not mappings are returned
    unchanged.
    """
    if not isinstance(value, Mapping):
        return value
    sensitive = frozenset(fields)
    return {key: (mask if key in sensitive else item) for key, item in value.items()}


def redact_inputs(inputs: object) -> object:
    return redact_top_level(inputs, SENSITIVE_INPUT_FIELDS)


def redact_result(result: object) -> object:
    return redact_top_level(result, SENSITIVE_RESULT_FIELDS)
