"""Thread state definition.

The state is a TypedDict. Fields annotated with a reducer
(``Annotated[type, reducer]``) are merged through it by the engine; every
other field is overwritten by the latest update.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Optional, Sequence, TypedDict, Union

from langchain_core.messages import BaseMessage, HumanMessage


class Verdict(str, Enum):
    """Evaluator's three-way quality classification (plus ``unset``)."""

    UNSET = "unset"
    GOOD = "good"
    NORMAL = "normal"
    BAD = "bad"


MessageUpdate = Union[BaseMessage, Sequence[BaseMessage], None]


def append_messages(left: Sequence[BaseMessage] | None, right: MessageUpdate) -> list[BaseMessage]:
    """Reducer for the message log: append only, never remove or reorder.

    A single message or a sequence are both accepted. Messages entering the
    log without an id get a fresh one so history can be matched later.
    """
    existing = list(left or [])
    if right is None:
        return existing
    incoming = [right] if isinstance(right, BaseMessage) else list(right)

    for message in incoming:
        if not isinstance(message, BaseMessage):
            raise TypeError(f"Message log only accepts BaseMessage, got {type(message).__name__}")
        if message.id is None:
            message.id = str(uuid.uuid4())

    return existing + incoming


class ThreadState(TypedDict, total=False):
    """State threaded through every node of one conversation thread."""

    thread_id: str
    """Opaque thread identifier (also the checkpoint key)."""

    task: str
    """Task description given by the user."""

    evaluation_verdict: Verdict
    """Latest verdict of the evaluator node."""

    messages: Annotated[list[BaseMessage], append_messages]
    """Append-only message log shared by all nodes."""

    planner_route: Optional[str]
    """Routing decision emitted by the orchestrator (kept out of message content)."""

    plan_iterations: int
    """How many times the orchestrator has planned in this run."""

    max_plan_iterations: int
    """Replan budget; a ``bad`` verdict past it routes to ``give_up``."""

    history_context: list[BaseMessage]
    """Checkpoint history merged with the in-flight log (history branch only)."""


def create_default_state(
    task: str = "",
    *,
    thread_id: str = "",
    max_plan_iterations: int = 3,
) -> ThreadState:
    """Create the initial state for a run, seeding the log with the task."""
    messages: list[Any] = [HumanMessage(content=task)] if task else []
    return ThreadState(
        thread_id=thread_id,
        task=task,
        evaluation_verdict=Verdict.UNSET,
        messages=messages,
        planner_route=None,
        plan_iterations=0,
        max_plan_iterations=max_plan_iterations,
        history_context=[],
    )


__all__ = ["ThreadState", "Verdict", "append_messages", "create_default_state"]
