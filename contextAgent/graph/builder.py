"""Graph builder for the context-engineering agent.

    START → orchestrator ─runner──→ runner ────────────────────────────┐
                 ↑      └history→ history_merge → message_optimizer ──┤
                 │                                                    ↓
                 └──────────────────bad─────────────────────────── evaluator
                                                  good / normal / give_up → END
"""

from __future__ import annotations

import logging
from typing import Optional

from contextAgent.graph.engine import END, START, CompiledGraph, StateGraph
from contextAgent.graph.nodes import (
    build_evaluator_node,
    build_history_merge_node,
    build_message_optimizer_node,
    build_orchestrator_node,
    build_runner_node,
)
from contextAgent.graph.routing import route_evaluator, route_planner
from contextAgent.graph.state import ThreadState
from contextAgent.persistence.checkpointer import BaseCheckpointStore
from contextAgent.tools.dispatcher import ToolDispatcher
from contextAgent.tools.registry import ToolRegistry

LOGGER = logging.getLogger("contextagent.builder")


def build_agent_graph(
    *,
    model,
    tool_registry: ToolRegistry,
    checkpointer: BaseCheckpointStore,
    step_limit: Optional[int] = None,
    max_tool_rounds: int = 5,
    dispatcher: Optional[ToolDispatcher] = None,
    structured_output_method: str = "function_calling",
) -> CompiledGraph:
    """Build and compile the agent graph.

    Args:
        model: Chat model shared by all nodes
        tool_registry: Tools bound to the runner
        checkpointer: Checkpoint store (also read by the history-merge node)
        step_limit: Maximum node executions per run (None = unlimited)
        max_tool_rounds: Model calls the runner may make per visit
        dispatcher: Optional custom tool dispatcher for the runner
        structured_output_method: ``with_structured_output`` method for the orchestrator and evaluator

    Returns:
        Compiled graph application
    """

    # ========== Build Nodes ==========
    orchestrator_node = build_orchestrator_node(model=model, structured_output_method=structured_output_method)
    runner_node = build_runner_node(
        model=model,
        tool_registry=tool_registry,
        dispatcher=dispatcher,
        max_tool_rounds=max_tool_rounds,
    )
    history_merge_node = build_history_merge_node(checkpointer=checkpointer)
    message_optimizer_node = build_message_optimizer_node(model=model)
    evaluator_node = build_evaluator_node(model=model, structured_output_method=structured_output_method)

    # ========== Build Graph ==========
    graph = StateGraph(ThreadState)

    graph.add_node("orchestrator", orchestrator_node)
    graph.add_node("runner", runner_node)
    graph.add_node("history_merge", history_merge_node)
    graph.add_node("message_optimizer", message_optimizer_node)
    graph.add_node("evaluator", evaluator_node)

    # ========== Routing ==========
    graph.add_edge(START, "orchestrator")

    graph.add_conditional_edges(
        "orchestrator",
        route_planner,
        {
            "runner": "runner",          # Work on the task with tools
            "history": "history_merge",  # Rebuild context from earlier turns
        },
    )

    graph.add_edge("runner", "evaluator")
    graph.add_edge("history_merge", "message_optimizer")
    graph.add_edge("message_optimizer", "evaluator")

    graph.add_conditional_edges(
        "evaluator",
        route_evaluator,
        {
            "good": END,
            "normal": END,
            "bad": "orchestrator",  # Replan
            "give_up": END,         # Replan budget spent
        },
    )

    # ========== Compile ==========
    app = graph.compile(checkpointer=checkpointer, step_limit=step_limit)
    LOGGER.info(f"Agent graph compiled ({len(tool_registry)} tool(s), step limit {step_limit})")
    return app


__all__ = ["build_agent_graph"]
