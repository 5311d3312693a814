"""JSON Schemas for tool inputs."""

from __future__ import annotations

import copy

OKTA_USER_STATUSES = [
    "ACTIVE",
    "DEPROVISIONED",
    "LOCKED_OUT",
    "PASSWORD_EXPIRED",
    "PROVISIONED",
    "RECOVERY",
    "STAGED",
    "SUSPENDED",
]

DEFAULT_PAGE_LIMIT = 100

_CURSOR = {
    "type": "string",
    "description": "Pagination cursor returned as 'nextCursor' by a previous call.",
}


def _limit(maximum: int) -> dict[str, object]:
    return {
        "type": "integer",
        "minimum": 1,
        "maximum": maximum,
        "description": f"Page size, 1-{maximum} (default: {DEFAULT_PAGE_LIMIT}).",
    }


EMAIL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "email": {
            "type": "string",
            "format": "email",
            "pattern": r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
            "description": "Primary email address of the user.",
        },
    },
    "required": ["email"],
    "additionalProperties": False,
}

SEARCH_USERS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "query": {
            "type": "string",
            "minLength": 1,
            "description": 'Okta search expression, e.g. profile.lastName sw "Sm".',
        },
        "status": {
            "type": "string",
            "enum": OKTA_USER_STATUSES,
            "description": "Only return users in this lifecycle status.",
        },
        "limit": _limit(200),
        "after": _CURSOR,
    },
    "required": ["query"],
    "additionalProperties": False,
}

GROUP_QUERY_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Name prefix to match."},
        "limit": _limit(200),
        "after": _CURSOR,
    },
    "additionalProperties": False,
}

APPS_QUERY_SCHEMA: dict[str, object] = copy.deepcopy(GROUP_QUERY_SCHEMA)

LOG_QUERY_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Keyword filter for System Log events."},
        "since": {"type": "string", "description": "ISO 8601 lower bound."},
        "until": {"type": "string", "description": "ISO 8601 upper bound."},
        "limit": _limit(1000),
        "after": _CURSOR,
    },
    "additionalProperties": False,
}

_USER_ID = {"type": "string", "minLength": 1, "description": "Okta user id."}
_GROUP_ID = {"type": "string", "minLength": 1, "description": "Okta group id."}

USER_ID_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"userId": _USER_ID},
    "required": ["userId"],
    "additionalProperties": False,
}

SUSPEND_USER_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "userId": _USER_ID,
        "reason": {"type": "string", "description": "Why the user is being suspended."},
    },
    "required": ["userId"],
    "additionalProperties": False,
}

USER_GROUP_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"userId": _USER_ID, "groupId": _GROUP_ID},
    "required": ["userId", "groupId"],
    "additionalProperties": False,
}

CONFIRM_PROPERTY: dict[str, object] = {
    "type": "boolean",
    "const": True,
    "description": "Must be true to execute the action.",
}


def preview_schema(action_schema: dict[str, object]) -> dict[str, object]:
    """Schema for the preview variant: every field optional, nothing enforced."""
    properties = dict(action_schema.get("properties", {}))  # type: ignore[arg-type]
    properties["preview"] = {"type": "boolean", "default": True}
    return {"type": "object", "properties": properties}


def confirm_schema(action_schema: dict[str, object]) -> dict[str, object]:
    """Schema for the execute variant: the action schema plus ``confirm: true``."""
    schema = copy.deepcopy(action_schema)
    properties = dict(schema.get("properties", {}))  # type: ignore[arg-type]
    properties["confirm"] = CONFIRM_PROPERTY
    schema["properties"] = properties
    required = list(schema.get("required", []))  # type: ignore[call-overload]
    if "confirm" not in required:
        required.append("confirm")
    schema["required"] = required
    return schema
