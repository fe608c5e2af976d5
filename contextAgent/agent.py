"""ContextEngineeringAgent - programmatic entry point.

Examples:
    >>> agent = ContextEngineeringAgent()
    >>> answer = await agent.run("Summarize what main.py does")

    >>> # Same thread: the history branch can see earlier turns
    >>> await agent.run("Which file did you read last time?", thread_id=thread_id)

    >>> # Continue a run abandoned after a model failure
    >>> await agent.resume(thread_id)
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from contextAgent.config import Settings
from contextAgent.graph import ThreadState
from contextAgent.graph.message_utils import last_message_text
from contextAgent.persistence import BaseCheckpointStore, Checkpoint
from contextAgent.runtime import build_application
from contextAgent.tools import ToolRegistry
from contextAgent.utils import log_agent_response, log_user_message

LOGGER = logging.getLogger("contextagent.agent")


class ContextEngineeringAgent:
    """Plan → run → evaluate agent over a checkpointed graph."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        model=None,
        checkpointer: Optional[BaseCheckpointStore] = None,
        tool_registry: Optional[ToolRegistry] = None,
    ):
        self.application = build_application(
            settings,
            model=model,
            checkpointer=checkpointer,
            tool_registry=tool_registry,
        )
        self.graph = self.application.graph
        self.checkpointer = self.application.checkpointer
        self.settings = self.application.settings

        LOGGER.info(f"ContextEngineeringAgent initialized with tools: {self.application.tool_registry.names()}")

    async def invoke(self, task: str, *, thread_id: Optional[str] = None) -> ThreadState:
        """Run one task to completion and return the final state."""
        thread_id = thread_id or str(uuid.uuid4())
        log_user_message(LOGGER, task)

        initial_state = self.application.initial_state(task, thread_id=thread_id)
        return await self.graph.ainvoke(initial_state, thread_id=thread_id)

    async def run(self, task: str, *, thread_id: Optional[str] = None) -> str:
        """Run one task and return the content of the last message."""
        final_state = await self.invoke(task, thread_id=thread_id)
        answer = last_message_text(final_state.get("messages", []))
        log_agent_response(LOGGER, answer)
        return answer

    async def resume(self, thread_id: str) -> str:
        """Resume an abandoned run from its last checkpoint."""
        final_state = await self.graph.aresume(thread_id)
        answer = last_message_text(final_state.get("messages", []))
        log_agent_response(LOGGER, answer)
        return answer

    def history(self, thread_id: str) -> List[Checkpoint]:
        """All checkpoints of a thread, oldest first."""
        return self.graph.get_state_history(thread_id)

    def threads(self) -> List[str]:
        return self.checkpointer.list_threads()


__all__ = ["ContextEngineeringAgent"]
