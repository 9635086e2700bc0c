"""Name-keyed registry of tool definitions."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from monad_mcp.tools.validators import FieldSpec

ToolHandler = Callable[..., Awaitable[Any]]


class RegistryError(LookupError):
    """Base class for registry failures."""


class ToolNotFoundError(RegistryError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class DuplicateToolError(RegistryError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Tool already registered: {name}")
        self.name = name


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Mapping[str, FieldSpec]
    handler: ToolHandler
    failure_message: Optional[str] = None


class ToolRegistry:
    """Registered tools in registration order."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    def register(
        self,
        name: str,
        description: str,
        input_schema: Optional[Mapping[str, FieldSpec]],
        handler: ToolHandler,
        *,
        failure_message: Optional[str] = None,
    ) -> ToolDefinition:
        if name in self._tools:
            raise DuplicateToolError(name)
        definition = ToolDefinition(
            name=name,
            description=description,
            input_schema=MappingProxyType(dict(input_schema or {})),
            handler=handler,
            failure_message=failure_message,
        )
        self._tools[name] = definition
        return definition

    def lookup(self, name: str) -> ToolDefinition:
        try:
            return self._tools[name]
        except (KeyError, TypeError):
            raise ToolNotFoundError(str(name)) from None

    def names(self) -> List[str]:
        return list(self._tools)

    def definitions(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
