"""Graph engine and agent graph assembly exports."""

from .builder import build_agent_graph
from .engine import END, START, CompiledGraph, StateGraph
from .state import ThreadState, Verdict, append_messages, create_default_state

__all__ = [
    "END",
    "START",
    "CompiledGraph",
    "StateGraph",
    "ThreadState",
    "Verdict",
    "append_messages",
    "build_agent_graph",
    "create_default_state",
]
