"""Tool registry, configuration and dispatch."""

from .config_loader import ToolConfig, build_tool_registry
from .dispatcher import ToolDispatcher
from .registry import ToolCapability, ToolMeta, ToolRegistry

__all__ = [
    "ToolCapability",
    "ToolConfig",
    "ToolDispatcher",
    "ToolMeta",
    "ToolRegistry",
    "build_tool_registry",
]
