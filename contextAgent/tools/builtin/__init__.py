"""Builtin workspace tools."""

from .file_ops import read_file
from .grep_code import grep_code
from .search_files import search_files

BUILTIN_TOOLS = {
    "read_file": read_file,
    "search_files": search_files,
    "grep_code": grep_code,
}

__all__ = ["BUILTIN_TOOLS", "grep_code", "read_file", "search_files"]
