"""Immutable tool registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class ToolCapability(Protocol):
    """What the dispatcher needs from a tool (LangChain ``BaseTool`` qualifies)."""

    name: str
    args_schema: Any

    async def ainvoke(self, input: Any, *args: Any, **kwargs: Any) -> Any:
        ...


@dataclass(frozen=True, slots=True)
class ToolMeta:
    """Descriptive attributes of a registered tool."""

    name: str
    category: str = "general"
    tags: List[str] = field(default_factory=list)


class ToolRegistry:
    """Read-only name → tool mapping, fixed at construction."""

    def __init__(
        self,
        tools: Optional[Iterable[ToolCapability]] = None,
        meta: Optional[Iterable[ToolMeta]] = None,
    ) -> None:
        registered: Dict[str, ToolCapability] = {}
        for tool in tools or ():
            if not isinstance(tool, ToolCapability):
                raise TypeError(f"{tool!r} does not provide name, args_schema and ainvoke")
            if tool.name in registered:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            registered[tool.name] = tool

        self._tools: Mapping[str, ToolCapability] = MappingProxyType(registered)
        self._meta: Mapping[str, ToolMeta] = MappingProxyType(
            {item.name: item for item in meta or () if item.name in registered}
        )

    @property
    def tools(self) -> Mapping[str, ToolCapability]:
        return self._tools

    def get(self, name: str) -> Optional[ToolCapability]:
        return self._tools.get(name)

    def get_tool(self, name: str) -> ToolCapability:
        if name not in self._tools:
            raise KeyError(f"Unknown tool: {name}")
        return self._tools[name]

    def get_meta(self, name: str) -> ToolMeta:
        return self._meta.get(name) or ToolMeta(name=name)

    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[ToolCapability]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"ToolRegistry({', '.join(self._tools)})"


__all__ = ["ToolCapability", "ToolMeta", "ToolRegistry"]
