"""Unified error types for the ContextAgent engine, nodes and tools."""

from __future__ import annotations

import json
from typing import Any, Iterable


class ContextAgentError(Exception):
    """Base exception for ContextAgent errors."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class GraphDefinitionError(ContextAgentError):
    """The graph definition is inconsistent (detected at compile time)."""
    pass


class RoutingError(ContextAgentError):
    """A routing function returned a label absent from the node's path map."""

    def __init__(self, source: str, label: Any, known_labels: Iterable[str]):
        self.source = source
        self.label = label
        self.known_labels = sorted(known_labels)
        super().__init__(
            f"Routing from '{source}' returned unmapped label {label!r} "
            f"(known labels: {', '.join(self.known_labels)})"
        )


class InvalidUpdateError(ContextAgentError):
    """A node returned an update the state schema cannot accept."""
    pass


class GraphRecursionError(ContextAgentError):
    """The run exceeded the configured step limit."""
    pass


class ModelInvocationError(ContextAgentError):
    """Error during model invocation."""
    pass


class ToolExecutionError(ContextAgentError):
    """Error during tool execution."""
    pass


def failure_result(error: str, **extra: Any) -> str:
    """Encode a tool failure the way every builtin tool reports one."""
    return json.dumps({"success": False, "error": error, **extra}, ensure_ascii=False)


def handle_model_error(error: Exception) -> str:
    """Convert model invocation errors to user-friendly messages.

    Args:
        error: Exception raised during model invocation

    Returns:
        User-friendly error message
    """
    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return "Too many requests, please try again later"

    if "timeout" in error_str:
        return "The model timed out, please retry"

    if "context_length" in error_str or "token" in error_str:
        return "Conversation history is too long, please start a new thread"

    if "invalid_api_key" in error_str or "authentication" in error_str:
        return "Invalid API key, check OPENAI_API_KEY"

    if "quota" in error_str or "insufficient" in error_str:
        return "Model service quota exhausted"

    return f"Model service unavailable: {error}"
