"""Search text files for a regular expression (grep-like)."""

import json
import logging
import re
from pathlib import Path
from typing import Annotated, Dict, Iterable, List, Optional

from langchain_core.tools import tool

from contextAgent.tools.builtin.workspace import (
    is_text_file,
    relative_name,
    resolve_in_workspace,
    walk_files,
)
from contextAgent.utils.error_handler import failure_result

LOGGER = logging.getLogger("contextagent.tools.grep_code")

__all__ = ["grep_code"]

MAX_RESULTS = 100


def _grep(files: Iterable[Path], regex: re.Pattern) -> List[Dict]:
    results = []
    for path in files:
        try:
            lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
        except OSError as e:
            LOGGER.debug(f"Skipping unreadable file {path}: {e}")
            continue
        for line_num, line in enumerate(lines, 1):
            if regex.search(line):
                results.append({"file": relative_name(path), "line": line_num, "content": line.strip()})
    return results


@tool
def grep_code(
    pattern: Annotated[str, "Text or regular expression to search for (case-insensitive)"],
    file_path: Annotated[Optional[str], "Single file to search (optional)"] = None,
    directory: Annotated[Optional[str], "Directory to search recursively (optional, default: workspace root)"] = None,
) -> str:
    """Search for a text pattern in files, like the grep command.

    Searches one file when file_path is given, otherwise every text file
    under directory (hidden directories and node_modules skipped). At most
    100 matches are returned; "count" is the total number of matches.

    Examples:
        grep_code("def main", file_path="app.py")
        grep_code("TODO|FIXME", directory="src")
    """
    try:
        regex = re.compile(pattern, re.IGNORECASE)

        if file_path:
            target = resolve_in_workspace(file_path)
            if not target.is_file():
                return failure_result(f"File not found: {file_path}", file_path=file_path)
            files: Iterable[Path] = [target]
        else:
            search_path = resolve_in_workspace(directory or ".")
            if not search_path.is_dir():
                return failure_result(f"Directory not found: {directory}")
            files = (path for path in walk_files(search_path) if is_text_file(path))

        results = _grep(files, regex)
        LOGGER.info(f"grep '{pattern}': {len(results)} match(es)")
        return json.dumps({
            "success": True,
            "results": results[:MAX_RESULTS],
            "count": len(results),
        }, ensure_ascii=False)

    except re.error as e:
        return failure_result(f"Invalid regular expression: {e}")
    except Exception as e:
        LOGGER.error(f"Failed to grep '{pattern}': {e}")
        return failure_result(str(e))
