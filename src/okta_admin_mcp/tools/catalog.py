"""Operation registry."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass

from okta_admin_mcp.auth.context import InvocationContext, get_invocation_context_optional
from okta_admin_mcp.mcp_runtime import ToolResult, ToolSpec
from okta_admin_mcp.tools.base import result_from_payload

OperationHandler = Callable[[dict[str, object], InvocationContext], Awaitable[dict[str, object]]]


@dataclass(frozen=True)
class Operation:
    name: str
    description: str
    input_schema: dict[str, object]
    handler: OperationHandler
    destructive: bool = False

    async def invoke(
        self,
        payload: dict[str, object],
        context: InvocationContext | None = None,
    ) -> dict[str, object]:
        context = (context or InvocationContext()).with_correlation_id()
        return await self.handler(dict(payload), context)

    def to_tool_spec(self) -> ToolSpec:
        async def _handler(payload: dict[str, object]) -> ToolResult:
            result = await self.invoke(payload, get_invocation_context_optional())
            return result_from_payload(result)

        return ToolSpec(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
            handler=_handler,
        )


class OperationCatalog:
    """Name-indexed set of operations, fixed after startup."""

    def __init__(self, operations: Iterable[Operation] = ()) -> None:
        self._operations: dict[str, Operation] = {}
        for operation in operations:
            self.register(operation)

    def register(self, operation: Operation) -> None:
        if operation.name in self._operations:
            raise ValueError(f"Duplicate operation name: {operation.name}")
        self._operations[operation.name] = operation

    def get(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise KeyError(f"Unknown operation: {name}") from None

    def names(self) -> list[str]:
        return list(self._operations)

    def destructive_names(self) -> list[str]:
        return [op.name for op in self._operations.values() if op.destructive]

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    async def invoke(
        self,
        name: str,
        payload: dict[str, object],
        context: InvocationContext | None = None,
    ) -> dict[str, object]:
        return await self.get(name).invoke(payload, context)

    def tool_specs(self) -> list[ToolSpec]:
        return [operation.to_tool_spec() for operation in self]
