"""Workspace confinement shared by the file tools."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from contextAgent.utils.error_handler import ToolExecutionError

SKIPPED_DIRS = {"node_modules", "__pycache__"}

TEXT_EXTENSIONS = {".txt", ".md", ".json", ".yaml", ".yml", ".toml", ".ini", ".cfg", ".conf",
                   ".py", ".js", ".ts", ".jsx", ".tsx", ".vue", ".java", ".kt", ".go", ".rs",
                   ".c", ".cpp", ".h", ".php", ".rb", ".swift", ".sql", ".sh", ".bash",
                   ".xml", ".html", ".css", ".csv", ".log"}


def get_workspace_root() -> Path:
    """Workspace root from AGENT_WORKSPACE_PATH (current directory when unset)."""
    return Path(os.environ.get("AGENT_WORKSPACE_PATH") or os.getcwd()).resolve()


def resolve_in_workspace(path: str) -> Path:
    """Resolve ``path`` (relative to the workspace root) and refuse escapes.

    Raises:
        ToolExecutionError: If the resolved path is outside the workspace
    """
    workspace_root = get_workspace_root()
    target = (workspace_root / path).resolve()
    try:
        target.relative_to(workspace_root)
    except ValueError:
        raise ToolExecutionError(f"Access denied. Path is outside the workspace: {path}") from None
    return target


def relative_name(path: Path) -> str:
    """Workspace-relative POSIX path used in tool results."""
    return path.relative_to(get_workspace_root()).as_posix()


def is_text_file(path: Path) -> bool:
    suffix = path.suffix.lower()
    return not suffix or suffix in TEXT_EXTENSIONS


def walk_files(directory: Path) -> Iterator[Path]:
    """Yield files under ``directory`` in sorted order, skipping hidden and vendored dirs."""
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if not d.startswith(".") and d not in SKIPPED_DIRS)
        for name in sorted(files):
            yield Path(root) / name


__all__ = [
    "TEXT_EXTENSIONS",
    "get_workspace_root",
    "is_text_file",
    "relative_name",
    "resolve_in_workspace",
    "walk_files",
]
