"""Mutating Okta tools, each published as a confirmation pair."""

from __future__ import annotations

from urllib.parse import quote

from okta_admin_mcp.audit.recorder import AuditRecorder
from okta_admin_mcp.okta.client import OktaClient
from okta_admin_mcp.policy.guard import AccessGuard
from okta_admin_mcp.tools._schemas import SUSPEND_USER_SCHEMA, USER_GROUP_SCHEMA, USER_ID_SCHEMA
from okta_admin_mcp.tools.catalog import Operation
from okta_admin_mcp.tools.confirmation import Action, ActionResult, build_confirmation_pair


def _seg(value: object) -> str:
    return quote(str(value), safe="")


def build_admin_operations(
    client: OktaClient,
    *,
    guard: AccessGuard,
    recorder: AuditRecorder,
) -> list[Operation]:
    def lifecycle(step: str, past_tense: str) -> Action:
        async def _run(payload: dict[str, object]) -> ActionResult:
            user_id = payload["userId"]
            res = await client.post(f"/users/{_seg(user_id)}/lifecycle/{step}")
            return ActionResult(
                {"ok": True, "message": f"User {user_id} {past_tense} successfully"},
                res.request_id,
            )

        return _run

    async def clear_user_sessions(payload: dict[str, object]) -> ActionResult:
        user_id = payload["userId"]
        res = await client.delete(f"/users/{_seg(user_id)}/sessions")
        return ActionResult(
            {"ok": True, "message": f"All sessions cleared for user {user_id}"},
            res.request_id,
        )

    async def add_user_to_group(payload: dict[str, object]) -> ActionResult:
        user_id, group_id = payload["userId"], payload["groupId"]
        res = await client.put(f"/groups/{_seg(group_id)}/users/{_seg(user_id)}")
        return ActionResult(
            {"ok": True, "message": f"User {user_id} added to group {group_id}"},
            res.request_id,
        )

    async def remove_user_from_group(payload: dict[str, object]) -> ActionResult:
        user_id, group_id = payload["userId"], payload["groupId"]
        res = await client.delete(f"/groups/{_seg(group_id)}/users/{_seg(user_id)}")
        return ActionResult(
            {"ok": True, "message": f"User {user_id} removed from group {group_id}"},
            res.request_id,
        )

    async def reset_password(payload: dict[str, object]) -> ActionResult:
        user_id = payload["userId"]
        res = await client.post(
            f"/users/{_seg(user_id)}/lifecycle/expiring_password",
            params={"tempPassword": "true"},
        )
        data = res.data if isinstance(res.data, dict) else {}
        return ActionResult(
            {
                "ok": True,
                "message": f"Password reset for user {user_id}",
                "tempPassword": data.get("tempPassword"),
            },
            res.request_id,
        )

    actions: list[tuple[str, dict[str, object], Action, str]] = [
        ("suspend_user", SUSPEND_USER_SCHEMA, lifecycle("suspend", "suspended"), "suspend user"),
        (
            "unsuspend_user",
            USER_ID_SCHEMA,
            lifecycle("unsuspend", "unsuspended"),
            "unsuspend user",
        ),
        (
            "deactivate_user",
            USER_ID_SCHEMA,
            lifecycle("deactivate", "deactivated"),
            "deactivate user",
        ),
        (
            "reactivate_user",
            USER_ID_SCHEMA,
            lifecycle("reactivate", "reactivated"),
            "reactivate user",
        ),
        ("clear_user_sessions", USER_ID_SCHEMA, clear_user_sessions, "clear user sessions"),
        ("add_user_to_group", USER_GROUP_SCHEMA, add_user_to_group, "add user to group"),
        (
            "remove_user_from_group",
            USER_GROUP_SCHEMA,
            remove_user_from_group,
            "remove user from group",
        ),
        ("reset_password", USER_ID_SCHEMA, reset_password, "reset user password"),
    ]

    operations: list[Operation] = []
    for name, schema, action, description in actions:
        operations.extend(
            build_confirmation_pair(
                name, schema, action, description, guard=guard, recorder=recorder
            )
        )
    return operations
