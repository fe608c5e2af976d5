"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import sys
from pathlib import Path

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
from langchain_core.messages import AIMessage

from contextAgent.config import GovernanceSettings, ModelSettings, PersistenceSettings, Settings
from contextAgent.persistence import MemoryCheckpointStore


class _StructuredRunnable:
    """What ``ScriptedChatModel.with_structured_output`` hands back."""

    def __init__(self, model: "ScriptedChatModel", schema):
        self.model = model
        self.schema = schema

    async def ainvoke(self, messages, config=None, **kwargs):
        self.model.structured_calls.append((self.schema.__name__, list(messages)))
        if not self.model.structured:
            raise AssertionError(f"No scripted structured output left for {self.schema.__name__}")
        payload = self.model.structured.pop(0)
        if isinstance(payload, Exception):
            raise payload
        if payload is None:
            # What LangChain parsers return when the model skips the tool call
            return None
        return self.schema(**payload)


class ScriptedChatModel:
    """Chat model stand-in replaying queued responses.

    Args:
        responses: Messages (or exceptions) returned by ``ainvoke``, in order
        structured: Payload dicts (or exceptions) returned by structured-output
            calls, in call order across all schemas
    """

    def __init__(self, responses=None, structured=None):
        self.responses = list(responses or [])
        self.structured = list(structured or [])
        self.calls = []
        self.structured_calls = []
        self.bound_tools = []
        self.structured_methods = {}

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self

    def with_structured_output(self, schema, **kwargs):
        self.structured_methods[schema.__name__] = kwargs.get("method")
        return _StructuredRunnable(self, schema)

    async def ainvoke(self, messages, config=None, **kwargs):
        self.calls.append(list(messages))
        if not self.responses:
            raise AssertionError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _tool_call_message(name, args, call_id="call_1", content=""):
    """AIMessage requesting a single tool call."""
    return AIMessage(content=content, tool_calls=[{"name": name, "args": args, "id": call_id}])


@pytest.fixture
def scripted_model():
    """Factory: ``scripted_model(responses=[...], structured=[...])``."""
    return ScriptedChatModel


@pytest.fixture
def tool_call_message():
    """Factory: ``tool_call_message("read_file", {"file_path": "a.txt"}, call_id="c1")``."""
    return _tool_call_message


@pytest.fixture
def checkpointer():
    return MemoryCheckpointStore()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temporary workspace with a few source files, exported as AGENT_WORKSPACE_PATH."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "README.md").write_text("# Demo project\nA tiny project used in tests.\n")
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text(
        "def main():\n"
        "    print('hello')\n"
        "\n"
        "# TODO: add argument parsing\n"
    )
    (root / "src" / "utils.py").write_text("def helper():\n    return 42\n")
    (root / ".git").mkdir()
    (root / ".git" / "config.py").write_text("def main(): pass\n")
    (root / "node_modules").mkdir()
    (root / "node_modules" / "lib.js").write_text("function main() {}\n")

    monkeypatch.setenv("AGENT_WORKSPACE_PATH", str(root))
    return root


@pytest.fixture
def settings(workspace):
    """Settings isolated from the developer's .env (API key set, in-memory checkpoints)."""
    return Settings(
        models=ModelSettings(MODEL_NAME="test-model", OPENAI_API_KEY="test-key"),
        governance=GovernanceSettings(MAX_PLAN_ITERATIONS=2, GRAPH_STEP_LIMIT=30, MAX_TOOL_ROUNDS=3),
        persistence=PersistenceSettings(CHECKPOINT_DB_PATH=None),
        AGENT_WORKSPACE_PATH=str(workspace),
    )
