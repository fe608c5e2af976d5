"""Runner node - tool-augmented model calls.

The model is called, its tool calls (if any) are dispatched in order, and the
model is called again with the results, until it answers without tool calls
or ``max_tool_rounds`` model calls have been made. When the rounds run out
with tool results still unanswered, one last call to the model without tools
produces the answer.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from langchain_core.messages import BaseMessage, SystemMessage

from contextAgent.graph.message_utils import prepare_model_messages
from contextAgent.graph.prompts import RUNNER_SYSTEM_PROMPT, build_tool_catalog
from contextAgent.graph.state import ThreadState
from contextAgent.tools.dispatcher import ToolDispatcher
from contextAgent.tools.registry import ToolRegistry
from contextAgent.utils.error_handler import ModelInvocationError, handle_model_error
from contextAgent.utils.logging_utils import log_error, log_node_entry, log_node_exit

LOGGER = logging.getLogger("contextagent.nodes.runner")


def build_runner_node(
    *,
    model,
    tool_registry: ToolRegistry,
    dispatcher: Optional[ToolDispatcher] = None,
    max_tool_rounds: int = 5,
) -> Callable:
    """Build the runner node.

    Args:
        model: Chat model supporting ``bind_tools``
        tool_registry: Tools the runner may call
        dispatcher: Tool dispatcher (defaults to one over ``tool_registry``)
        max_tool_rounds: Tool-enabled model calls allowed per visit

    Returns:
        Async node function over ThreadState
    """
    if max_tool_rounds < 1:
        raise ValueError("max_tool_rounds must be at least 1")

    dispatcher = dispatcher or ToolDispatcher(tool_registry)
    tools = tool_registry.list_tools()
    runner_model = model.bind_tools(tools) if tools else model
    system_message = SystemMessage(
        content=RUNNER_SYSTEM_PROMPT.format(tool_catalog=build_tool_catalog(tool_registry))
    )

    async def call_model(chat_model, messages: List[BaseMessage]) -> BaseMessage:
        try:
            return await chat_model.ainvoke(messages)
        except Exception as e:
            log_error(LOGGER, e, "runner model call")
            raise ModelInvocationError(
                f"Runner model call failed: {e}",
                user_message=handle_model_error(e),
            ) from e

    async def runner_node(state: ThreadState) -> dict:
        log_node_entry(LOGGER, "runner", state)

        history = state.get("messages", [])
        produced: List[BaseMessage] = []

        for round_num in range(1, max_tool_rounds + 1):
            prompt = prepare_model_messages([*history, *produced], system_message)
            LOGGER.info(f"[Runner] Round {round_num}: calling model with {len(tools)} tool(s), {len(prompt)} message(s)")

            response = await call_model(runner_model, prompt)
            produced.append(response)
            tool_calls = getattr(response, "tool_calls", None) or []
            if not tool_calls:
                break
            produced.extend(await dispatcher.dispatch(tool_calls))
        else:
            LOGGER.warning(f"[Runner] Tool round limit ({max_tool_rounds}) reached, asking for a final answer without tools")
            prompt = prepare_model_messages([*history, *produced], system_message)
            produced.append(await call_model(model, prompt))

        updates = {"messages": produced}
        log_node_exit(LOGGER, "runner", updates)
        return updates

    return runner_node


__all__ = ["build_runner_node"]
