"""Test read_file, search_files and grep_code tools."""

import json

import pytest

from contextAgent.tools.builtin import BUILTIN_TOOLS, grep_code, read_file, search_files
from contextAgent.tools.builtin.file_ops import MAX_READ_CHARS


@pytest.fixture(autouse=True)
def _workspace(workspace):
    """Every test runs inside the temporary workspace."""
    return workspace


# ========== read_file Tests ==========

def test_read_file_returns_content():
    result = json.loads(read_file.invoke({"file_path": "src/app.py"}))

    assert result["success"] is True
    assert result["file_path"] == "src/app.py"
    assert "def main():" in result["content"]
    assert result["size"] == len(result["content"])
    assert result["truncated"] is False


def test_read_file_missing():
    result = json.loads(read_file.invoke({"file_path": "nope.txt"}))

    assert result["success"] is False
    assert "not found" in result["error"]
    assert result["file_path"] == "nope.txt"


def test_read_file_directory():
    result = json.loads(read_file.invoke({"file_path": "src"}))
    assert result["success"] is False
    assert "Not a file" in result["error"]


@pytest.mark.parametrize("path", ["../secret.txt", "src/../../secret.txt", "/etc/passwd"])
def test_read_file_outside_workspace_denied(workspace, path):
    (workspace.parent / "secret.txt").write_text("top secret")

    result = json.loads(read_file.invoke({"file_path": path}))

    assert result["success"] is False
    assert "Access denied" in result["error"]


def test_read_file_truncates_large_files(workspace):
    (workspace / "big.txt").write_text("x" * (MAX_READ_CHARS + 10))

    result = json.loads(read_file.invoke({"file_path": "big.txt"}))

    assert result["truncated"] is True
    assert result["size"] == MAX_READ_CHARS + 10
    assert len(result["content"]) == MAX_READ_CHARS


# ========== search_files Tests ==========

def test_search_files_by_pattern():
    result = json.loads(search_files.invoke({"directory": ".", "pattern": "*.py"}))

    assert result["success"] is True
    assert result["files"] == ["src/app.py", "src/utils.py"]
    assert result["count"] == 2


def test_search_files_skips_hidden_and_node_modules():
    result = json.loads(search_files.invoke({}))

    assert "README.md" in result["files"]
    assert not any(f.startswith(".git/") for f in result["files"])
    assert not any(f.startswith("node_modules/") for f in result["files"])


def test_search_files_is_case_insensitive():
    result = json.loads(search_files.invoke({"pattern": "readme.*"}))
    assert result["files"] == ["README.md"]


def test_search_files_caps_results(workspace):
    many = workspace / "many"
    many.mkdir()
    for i in range(60):
        (many / f"file_{i:02d}.txt").write_text(str(i))

    result = json.loads(search_files.invoke({"directory": "many", "pattern": "*.txt"}))

    assert result["count"] == 60
    assert len(result["files"]) == 50


def test_search_files_missing_directory():
    result = json.loads(search_files.invoke({"directory": "ghost"}))
    assert result["success"] is False


# ========== grep_code Tests ==========

def test_grep_code_in_directory():
    result = json.loads(grep_code.invoke({"pattern": "def main", "directory": "."}))

    assert result["success"] is True
    assert result["results"] == [{"file": "src/app.py", "line": 1, "content": "def main():"}]


def test_grep_code_defaults_to_workspace_root():
    result = json.loads(grep_code.invoke({"pattern": "return 42"}))
    assert [r["file"] for r in result["results"]] == ["src/utils.py"]


def test_grep_code_single_file_case_insensitive():
    result = json.loads(grep_code.invoke({"pattern": "todo", "file_path": "src/app.py"}))

    assert result["count"] == 1
    assert result["results"][0]["line"] == 4


def test_grep_code_regex():
    result = json.loads(grep_code.invoke({"pattern": r"def \w+\(\)", "directory": "src"}))
    assert {r["content"] for r in result["results"]} == {"def main():", "def helper():"}


def test_grep_code_invalid_regex():
    result = json.loads(grep_code.invoke({"pattern": "([unclosed"}))

    assert result["success"] is False
    assert "Invalid regular expression" in result["error"]


def test_grep_code_caps_results(workspace):
    (workspace / "log.txt").write_text("match\n" * 150)

    result = json.loads(grep_code.invoke({"pattern": "match", "file_path": "log.txt"}))

    assert result["count"] == 150
    assert len(result["results"]) == 100


def test_builtin_tools_are_registered_by_name():
    assert set(BUILTIN_TOOLS) == {"read_file", "search_files", "grep_code"}
    assert all(tool.name == name for name, tool in BUILTIN_TOOLS.items())
