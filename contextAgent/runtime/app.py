"""Runtime assembly for the context-engineering agent graph."""

from __future__ import annotations

import logging
import os
from typing import Callable, NamedTuple, Optional

from contextAgent.config import Settings, get_settings
from contextAgent.graph import CompiledGraph, ThreadState, build_agent_graph, create_default_state
from contextAgent.models import build_chat_model
from contextAgent.persistence import BaseCheckpointStore, build_checkpointer
from contextAgent.tools import ToolRegistry, build_tool_registry

LOGGER = logging.getLogger("contextagent.runtime")


class Application(NamedTuple):
    """Everything a caller needs to drive runs."""

    graph: CompiledGraph
    initial_state: Callable[..., ThreadState]
    tool_registry: ToolRegistry
    checkpointer: BaseCheckpointStore
    settings: Settings


def build_application(
    settings: Optional[Settings] = None,
    *,
    model=None,
    checkpointer: Optional[BaseCheckpointStore] = None,
    tool_registry: Optional[ToolRegistry] = None,
) -> Application:
    """Wire settings, model, tools and checkpoint store into a compiled graph.

    Args:
        settings: Application settings (defaults to ``get_settings()``)
        model: Chat model override (defaults to ChatOpenAI from settings)
        checkpointer: Checkpoint store override (defaults to CHECKPOINT_DB_PATH or memory)
        tool_registry: Tool registry override (defaults to config/tools.yaml)

    Returns:
        Application tuple
    """
    settings = settings or get_settings()

    if settings.workspace_path:
        os.environ["AGENT_WORKSPACE_PATH"] = str(settings.workspace_path)
        LOGGER.info(f"Workspace: {settings.workspace_path}")

    if model is None:
        model = build_chat_model(settings.models)
    if tool_registry is None:
        tool_registry = build_tool_registry(settings.tools_config_path)
    if checkpointer is None:
        checkpointer = build_checkpointer(settings.persistence.checkpoint_db_path)

    app = build_agent_graph(
        model=model,
        tool_registry=tool_registry,
        checkpointer=checkpointer,
        step_limit=settings.governance.step_limit,
        max_tool_rounds=settings.governance.max_tool_rounds,
        structured_output_method=settings.models.structured_output_method,
    )

    max_plan_iterations = settings.governance.max_plan_iterations

    def initial_state(task: str, *, thread_id: str = "") -> ThreadState:
        return create_default_state(task, thread_id=thread_id, max_plan_iterations=max_plan_iterations)

    return Application(
        graph=app,
        initial_state=initial_state,
        tool_registry=tool_registry,
        checkpointer=checkpointer,
        settings=settings,
    )


__all__ = ["Application", "build_application"]
