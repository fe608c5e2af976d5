"""Utilities for preparing the message log before it is sent to a model."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from langchain_core.messages import AIMessage, BaseMessage, ToolMessage

ORCHESTRATOR_NAME = "orchestrator"
ROUTE_KWARG = "route"


def build_route_message(label: str) -> AIMessage:
    """Create the tagged message recording an orchestrator routing decision."""
    return AIMessage(content=label, name=ORCHESTRATOR_NAME, additional_kwargs={ROUTE_KWARG: label})


def is_route_message(message: BaseMessage) -> bool:
    return (
        isinstance(message, AIMessage)
        and message.name == ORCHESTRATOR_NAME
        and ROUTE_KWARG in message.additional_kwargs
    )


def strip_route_messages(messages: Iterable[BaseMessage]) -> List[BaseMessage]:
    """Drop orchestrator control messages, which are not conversation content."""
    return [msg for msg in messages if not is_route_message(msg)]


def clean_message_history(messages: List[BaseMessage]) -> List[BaseMessage]:
    """Remove AI messages whose tool_calls never got a ToolMessage answer.

    OpenAI-compatible APIs reject a history where an assistant tool call is
    not followed by its result (e.g. a run abandoned mid-dispatch).
    """
    answered_call_ids: Set[str] = {
        msg.tool_call_id for msg in messages if isinstance(msg, ToolMessage) and msg.tool_call_id
    }

    cleaned: List[BaseMessage] = []
    for msg in messages:
        if isinstance(msg, AIMessage) and msg.tool_calls:
            if any(tc.get("id") and tc["id"] not in answered_call_ids for tc in msg.tool_calls):
                continue
        cleaned.append(msg)
    return cleaned


def prepare_model_messages(
    messages: Iterable[BaseMessage],
    system_message: Optional[BaseMessage] = None,
) -> List[BaseMessage]:
    """Log → model prompt: control messages removed, optional system message first."""
    prepared = clean_message_history(strip_route_messages(messages))
    return [system_message, *prepared] if system_message is not None else prepared


def last_message_text(messages: List[BaseMessage]) -> str:
    """Content of the last message as plain text ("" for an empty log)."""
    if not messages:
        return ""
    content = messages[-1].content
    if isinstance(content, str):
        return content
    # Multimodal content: keep the text blocks only
    parts = [
        block.get("text", "") if isinstance(block, dict) else str(block)
        for block in content
    ]
    return "".join(parts)


__all__ = [
    "ORCHESTRATOR_NAME",
    "build_route_message",
    "clean_message_history",
    "is_route_message",
    "last_message_text",
    "prepare_model_messages",
    "strip_route_messages",
]
