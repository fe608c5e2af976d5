"""Tool configuration loader (``config/tools.yaml``)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import yaml

from .registry import ToolCapability, ToolMeta, ToolRegistry

LOGGER = logging.getLogger("contextagent.tools.config")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "tools.yaml"


class ToolConfig:
    """Tool configuration manager."""

    def __init__(self, config_path: Union[str, Path, None] = None):
        """Load tool configuration from YAML file.

        Args:
            config_path: Path to tools.yaml (defaults to the packaged one)
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.config = self._load_config()

    def _load_config(self) -> dict:
        if not self.config_path.exists():
            LOGGER.warning(f"Tools config not found: {self.config_path}, using defaults")
            return self._default_config()

        with open(self.config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config.get("tools", {}), dict):
            raise ValueError(f"'tools' must be a mapping in {self.config_path}")
        LOGGER.info(f"Loaded tools configuration from {self.config_path}")
        return config

    def _default_config(self) -> dict:
        return {
            "tools": {
                "read_file": {"enabled": True, "category": "file"},
                "search_files": {"enabled": True, "category": "file"},
                "grep_code": {"enabled": True, "category": "search"},
            }
        }

    def _entries(self) -> Dict[str, dict]:
        return {
            name: (settings if isinstance(settings, dict) else {})
            for name, settings in (self.config.get("tools") or {}).items()
        }

    def get_enabled_tools(self) -> List[str]:
        """Enabled tool names, in file order."""
        return [name for name, settings in self._entries().items() if settings.get("enabled", True)]

    def get_tool_meta(self, name: str) -> ToolMeta:
        settings = self._entries().get(name, {})
        return ToolMeta(
            name=name,
            category=settings.get("category", "general"),
            tags=list(settings.get("tags", [])),
        )


def build_tool_registry(
    config_path: Union[str, Path, None] = None,
    available: Optional[Mapping[str, ToolCapability]] = None,
) -> ToolRegistry:
    """Build the registry of enabled tools.

    Args:
        config_path: tools.yaml location (defaults to the packaged one)
        available: Tools that may be enabled (defaults to the builtin tools)

    Returns:
        Immutable ToolRegistry
    """
    if available is None:
        from .builtin import BUILTIN_TOOLS
        available = BUILTIN_TOOLS

    config = ToolConfig(config_path)
    tools, meta = [], []
    for name in config.get_enabled_tools():
        if name not in available:
            LOGGER.warning(f"Tool '{name}' is enabled in config but not available, skipping")
            continue
        tools.append(available[name])
        meta.append(config.get_tool_meta(name))

    registry = ToolRegistry(tools, meta)
    LOGGER.info(f"Tool registry ready: {registry.names()}")
    return registry


__all__ = ["DEFAULT_CONFIG_PATH", "ToolConfig", "build_tool_registry"]
