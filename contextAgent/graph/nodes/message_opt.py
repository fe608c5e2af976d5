"""Message-optimizer node - answers from the widened history context."""

from __future__ import annotations

import logging
from typing import Callable

from contextAgent.graph.message_utils import prepare_model_messages
from contextAgent.graph.state import ThreadState
from contextAgent.utils.error_handler import ModelInvocationError, handle_model_error
from contextAgent.utils.logging_utils import log_error, log_node_entry, log_node_exit

LOGGER = logging.getLogger("contextagent.nodes.message_opt")


def build_message_optimizer_node(*, model) -> Callable:
    """Build the message-optimizer node.

    The model sees ``history_context`` (the log when it is empty) with no
    system instruction; its single response is appended to the log.
    """

    async def message_optimizer_node(state: ThreadState) -> dict:
        log_node_entry(LOGGER, "message_optimizer", state)

        context = state.get("history_context") or state.get("messages", [])
        try:
            response = await model.ainvoke(prepare_model_messages(context))
        except Exception as e:
            log_error(LOGGER, e, "message optimizer model call")
            raise ModelInvocationError(
                f"Message optimizer model call failed: {e}",
                user_message=handle_model_error(e),
            ) from e

        updates = {"messages": [response]}
        log_node_exit(LOGGER, "message_optimizer", updates)
        return updates

    return message_optimizer_node


__all__ = ["build_message_optimizer_node"]
