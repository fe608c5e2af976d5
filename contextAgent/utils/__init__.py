"""Shared helpers: logging and error handling."""

from .error_handler import (
    ContextAgentError,
    GraphDefinitionError,
    GraphRecursionError,
    InvalidUpdateError,
    ModelInvocationError,
    RoutingError,
    ToolExecutionError,
    failure_result,
    handle_model_error,
)
from .logging_utils import (
    log_agent_response,
    log_error,
    log_node_entry,
    log_node_exit,
    log_routing_decision,
    log_tool_call,
    log_tool_result,
    log_user_message,
    setup_logging,
)

__all__ = [
    "ContextAgentError",
    "GraphDefinitionError",
    "GraphRecursionError",
    "InvalidUpdateError",
    "ModelInvocationError",
    "RoutingError",
    "ToolExecutionError",
    "failure_result",
    "handle_model_error",
    "log_agent_response",
    "log_error",
    "log_node_entry",
    "log_node_exit",
    "log_routing_decision",
    "log_tool_call",
    "log_tool_result",
    "log_user_message",
    "setup_logging",
]
