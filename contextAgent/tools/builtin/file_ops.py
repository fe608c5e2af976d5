"""File reading tool with workspace isolation."""

import json
import logging
from typing import Annotated

from langchain_core.tools import tool

from contextAgent.tools.builtin.workspace import relative_name, resolve_in_workspace
from contextAgent.utils.error_handler import failure_result

LOGGER = logging.getLogger("contextagent.tools.file_ops")

__all__ = ["read_file"]

MAX_READ_CHARS = 50_000


@tool
def read_file(
    file_path: Annotated[str, "File path relative to the workspace root"]
) -> str:
    """Read the content of a code file or other text document in the workspace.

    Files longer than 50,000 characters are truncated; use grep_code to find
    specific content in large files.

    Returns:
        JSON: {"success": true, "file_path", "content", "size", "truncated"}
        or {"success": false, "error", "file_path"}

    Examples:
        read_file("README.md")
        read_file("src/app/main.py")
    """
    try:
        target_path = resolve_in_workspace(file_path)

        if not target_path.exists():
            return failure_result(f"File not found: {file_path}", file_path=file_path)
        if not target_path.is_file():
            return failure_result(f"Not a file: {file_path}", file_path=file_path)

        content = target_path.read_text(encoding="utf-8", errors="replace")
        size = len(content)
        truncated = size > MAX_READ_CHARS
        if truncated:
            content = content[:MAX_READ_CHARS]

        LOGGER.info(f"Read file: {file_path} ({size} chars{', truncated' if truncated else ''})")
        return json.dumps({
            "success": True,
            "file_path": relative_name(target_path),
            "content": content,
            "size": size,
            "truncated": truncated,
        }, ensure_ascii=False)

    except Exception as e:
        LOGGER.error(f"Failed to read file {file_path}: {e}")
        return failure_result(str(e), file_path=file_path)
