"""Find files by name pattern."""

import fnmatch
import json
import logging
from typing import Annotated, Optional

from langchain_core.tools import tool

from contextAgent.tools.builtin.workspace import relative_name, resolve_in_workspace, walk_files
from contextAgent.utils.error_handler import failure_result

LOGGER = logging.getLogger("contextagent.tools.search_files")

__all__ = ["search_files"]

MAX_FILES = 50


@tool
def search_files(
    directory: Annotated[str, "Directory to search, relative to the workspace root"] = ".",
    pattern: Annotated[Optional[str], "File name pattern with * and ? wildcards (optional)"] = None,
) -> str:
    """Search a directory recursively for files, optionally matching a name pattern.

    Only file names are matched (case-insensitive), contents are not read.
    Hidden directories and node_modules are skipped. At most 50 paths are
    returned; "count" is the total number of matches.

    Examples:
        search_files(".", "*.py")
        search_files("docs", "*guide*")
    """
    try:
        search_path = resolve_in_workspace(directory)

        if not search_path.exists():
            return failure_result(f"Directory not found: {directory}")
        if not search_path.is_dir():
            return failure_result(f"Not a directory: {directory}")

        matches = [
            relative_name(path)
            for path in walk_files(search_path)
            if not pattern or fnmatch.fnmatch(path.name.lower(), pattern.lower())
        ]

        LOGGER.info(f"Found {len(matches)} file(s) matching '{pattern or '*'}' in {directory}")
        return json.dumps({
            "success": True,
            "files": matches[:MAX_FILES],
            "count": len(matches),
        }, ensure_ascii=False)

    except Exception as e:
        LOGGER.error(f"Failed to search files in {directory}: {e}")
        return failure_result(str(e))
