"""Orchestrator node - plans the task and picks the next branch.

The decision travels as a typed state field (``planner_route``). A tagged
``AIMessage`` carrying the same label is appended to the log as the record of
the decision; nodes that prompt a model strip it again.
"""

from __future__ import annotations

import logging
from typing import Callable

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from contextAgent.graph.message_utils import build_route_message, prepare_model_messages
from contextAgent.graph.prompts import ORCHESTRATOR_SYSTEM_PROMPT, build_orchestrator_task_message
from contextAgent.graph.state import ThreadState
from contextAgent.utils.error_handler import ModelInvocationError, handle_model_error
from contextAgent.utils.logging_utils import log_error, log_node_entry, log_node_exit

LOGGER = logging.getLogger("contextagent.nodes.orchestrator")

PLANNER_LABELS = ("runner", "history")


class PlanDecision(BaseModel):
    """Structured orchestrator output."""

    # Not validated here: an off-menu label reaches routing unchanged.
    next_step: str = Field(
        description="Next branch: 'runner' to work on the task, 'history' to rebuild context from earlier turns.",
        json_schema_extra={"enum": list(PLANNER_LABELS)},
    )
    plan: str = Field(default="", description="Short plan for the task.")


def build_orchestrator_node(*, model, structured_output_method: str = "function_calling") -> Callable:
    """Build the orchestrator node.

    Args:
        model: Chat model supporting ``with_structured_output``
        structured_output_method: ``method`` passed to ``with_structured_output``

    Returns:
        Async node function over ThreadState
    """
    planner = model.with_structured_output(PlanDecision, method=structured_output_method)

    async def orchestrator_node(state: ThreadState) -> dict:
        log_node_entry(LOGGER, "orchestrator", state)

        attempt = state.get("plan_iterations", 0) + 1
        messages = state.get("messages", [])
        prompt = prepare_model_messages(messages, SystemMessage(content=ORCHESTRATOR_SYSTEM_PROMPT))
        # The seeded log already starts with the task as a user message
        task = "" if messages else state.get("task", "")
        prompt.append(HumanMessage(content=build_orchestrator_task_message(attempt, task=task)))

        try:
            decision = await planner.ainvoke(prompt)
            if not isinstance(decision, PlanDecision):
                raise ValueError(f"structured output could not be parsed (got {type(decision).__name__})")
        except Exception as e:
            log_error(LOGGER, e, "orchestrator model call")
            raise ModelInvocationError(
                f"Orchestrator model call failed: {e}",
                user_message=handle_model_error(e),
            ) from e

        label = decision.next_step
        if decision.plan:
            LOGGER.info(f"Plan (attempt {attempt}): {decision.plan[:200]}")

        updates = {
            "messages": [build_route_message(label)],
            "planner_route": label,
            "plan_iterations": attempt,
        }
        log_node_exit(LOGGER, "orchestrator", updates)
        return updates

    return orchestrator_node


__all__ = ["PLANNER_LABELS", "PlanDecision", "build_orchestrator_node"]
