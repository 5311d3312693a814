"""Read-only Okta tools."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Mapping

from okta_admin_mcp.audit.recorder import AuditRecorder
from okta_admin_mcp.auth.context import InvocationContext
from okta_admin_mcp.okta.client import OktaClient, OktaResponse
from okta_admin_mcp.okta.headers import check_rate_limit, next_cursor_from_link
from okta_admin_mcp.policy.guard import AccessGuard
from okta_admin_mcp.tools._schemas import (
    APPS_QUERY_SCHEMA,
    DEFAULT_PAGE_LIMIT,
    EMAIL_SCHEMA,
    GROUP_QUERY_SCHEMA,
    LOG_QUERY_SCHEMA,
    SEARCH_USERS_SCHEMA,
)
from okta_admin_mcp.tools.base import elapsed_ms, validate_or_raise
from okta_admin_mcp.tools.catalog import Operation

ReadRunner = Callable[[dict[str, object]], Awaitable[dict[str, object]]]

TOOL_DESCRIPTIONS = {
    "get_user_by_email": "Return a single user by primary email address.",
    "search_users": (
        "Search users with Okta search syntax. Supports pagination via 'after' cursor."
    ),
    "list_groups": (
        "List groups with optional query filter. Supports pagination via 'after' cursor."
    ),
    "list_apps": (
        "List Okta applications with optional query filter. "
        "Supports pagination via 'after' cursor."
    ),
    "system_log": (
        "Query Okta System Log by expression with optional since/until ISO timestamps."
    ),
}


def guarded_operation(
    name: str,
    schema: dict[str, object],
    run: ReadRunner,
    *,
    guard: AccessGuard,
    recorder: AuditRecorder,
) -> Operation:
    """Wrap a read runner with validation, role enforcement and auditing.

    Validation errors are raised before anything is audited; guard denials
    and upstream failures are audited with ok=false and re-raised.
    """

    async def _handler(
        payload: dict[str, object], context: InvocationContext
    ) -> dict[str, object]:
        validate_or_raise(schema, payload)
        started = time.monotonic()
        try:
            guard.ensure_allowed(name, context)
            result = await run(payload)
        except Exception as exc:
            recorder.audit(
                name, payload, None, context, error=exc, duration_ms=elapsed_ms(started)
            )
            raise
        recorder.audit(name, payload, result, context, duration_ms=elapsed_ms(started))
        return result

    return Operation(
        name=name,
        description=TOOL_DESCRIPTIONS.get(name, "No description available."),
        input_schema=schema,
        handler=_handler,
    )


def _items(response: OktaResponse) -> list[Mapping[str, object]]:
    data = response.data
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, Mapping)]


def _sub(item: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = item.get(key)
    return value if isinstance(value, Mapping) else {}


def _user_result(user: Mapping[str, object], *, with_login: bool) -> dict[str, object]:
    profile = _sub(user, "profile")
    result: dict[str, object] = {
        "id": user.get("id"),
        "status": user.get("status"),
        "email": profile.get("email"),
        "firstName": profile.get("firstName"),
        "lastName": profile.get("lastName"),
    }
    if with_login:
        result["login"] = profile.get("login")
    return result


def _page_params(payload: Mapping[str, object]) -> dict[str, object]:
    return {
        "limit": payload.get("limit", DEFAULT_PAGE_LIMIT),
        "after": payload.get("after"),
    }


def _paginated(
    response: OktaResponse, key: str, items: list[dict[str, object]]
) -> dict[str, object]:
    check_rate_limit(response.headers)
    return {key: items, "nextCursor": next_cursor_from_link(response.link)}


def build_read_operations(
    client: OktaClient,
    *,
    guard: AccessGuard,
    recorder: AuditRecorder,
) -> list[Operation]:
    async def get_user_by_email(payload: dict[str, object]) -> dict[str, object]:
        search = f'profile.email eq "{payload["email"]}"'
        res = await client.get("/users", params={"search": search})
        users = _items(res)
        if not users:
            return {"found": False}
        return {"found": True, "user": _user_result(users[0], with_login=True)}

    async def search_users(payload: dict[str, object]) -> dict[str, object]:
        params = {"search": payload["query"], **_page_params(payload)}
        if payload.get("status"):
            params["filter"] = f'status eq "{payload["status"]}"'
        res = await client.get("/users", params=params)
        users = [_user_result(u, with_login=False) for u in _items(res)]
        return _paginated(res, "users", users)

    async def list_groups(payload: dict[str, object]) -> dict[str, object]:
        params = _page_params(payload)
        if payload.get("query"):
            params["q"] = payload["query"]
        res = await client.get("/groups", params=params)
        groups = [
            {"id": g.get("id"), "name": _sub(g, "profile").get("name"), "type": g.get("type")}
            for g in _items(res)
        ]
        return _paginated(res, "groups", groups)

    async def list_apps(payload: dict[str, object]) -> dict[str, object]:
        params = _page_params(payload)
        if payload.get("query"):
            params["q"] = payload["query"]
        res = await client.get("/apps", params=params)
        apps = [
            {
                "id": a.get("id"),
                "label": a.get("label"),
                "status": a.get("status"),
                "name": a.get("name"),
            }
            for a in _items(res)
        ]
        return _paginated(res, "apps", apps)

    async def system_log(payload: dict[str, object]) -> dict[str, object]:
        params = _page_params(payload)
        for key in ("query", "since", "until"):
            if payload.get(key):
                params[key] = payload[key]
        res = await client.get("/logs", params=params)
        events = []
        for e in _items(res):
            targets = e.get("target")
            first_target = targets[0] if isinstance(targets, list) and targets else None
            events.append(
                {
                    "uuid": e.get("uuid"),
                    "published": e.get("published"),
                    "eventType": e.get("eventType"),
                    "outcome": _sub(e, "outcome").get("result"),
                    "actor": _sub(e, "actor").get("displayName"),
                    "target": (
                        first_target.get("displayName")
                        if isinstance(first_target, Mapping)
                        else None
                    ),
                }
            )
        return _paginated(res, "events", events)

    runners: list[tuple[str, dict[str, object], ReadRunner]] = [
        ("get_user_by_email", EMAIL_SCHEMA, get_user_by_email),
        ("search_users", SEARCH_USERS_SCHEMA, search_users),
        ("list_groups", GROUP_QUERY_SCHEMA, list_groups),
        ("list_apps", APPS_QUERY_SCHEMA, list_apps),
        ("system_log", LOG_QUERY_SCHEMA, system_log),
    ]
    return [
        guarded_operation(name, schema, run, guard=guard, recorder=recorder)
        for name, schema, run in runners
    ]
