"""Sequential tool dispatch.

Every tool call yields exactly one ToolMessage, in the order the calls were
issued. Failures (unknown tool, exception in the tool) become a failure
result with ``status="error"``; the run carries on.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Sequence

from langchain_core.messages import ToolCall, ToolMessage

from contextAgent.tools.registry import ToolRegistry
from contextAgent.utils.error_handler import failure_result
from contextAgent.utils.logging_utils import log_error, log_tool_call, log_tool_result

LOGGER = logging.getLogger("contextagent.tools.dispatcher")


def _to_content(result: Any) -> str:
    if isinstance(result, str):
        return result
    if isinstance(result, ToolMessage):
        return result.content if isinstance(result.content, str) else json.dumps(result.content, default=str)
    return json.dumps(result, ensure_ascii=False, default=str)


def _reports_success(content: str) -> bool:
    """Read the ``success`` flag of a JSON tool result (True for plain text)."""
    try:
        payload = json.loads(content)
    except ValueError:
        return True
    return not (isinstance(payload, dict) and payload.get("success") is False)


class ToolDispatcher:
    """Executes a batch of tool calls one after another."""

    def __init__(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry

    async def dispatch(self, tool_calls: Sequence[ToolCall]) -> List[ToolMessage]:
        results: List[ToolMessage] = []
        for call in tool_calls:
            results.append(await self.execute(call))
        if tool_calls:
            LOGGER.info(f"Dispatched {len(tool_calls)} tool call(s)")
        return results

    async def execute(self, call: ToolCall) -> ToolMessage:
        name = call.get("name") or ""
        call_id = call.get("id") or ""
        args = call.get("args") or {}
        log_tool_call(LOGGER, name, args)

        tool = self.tool_registry.get(name)
        if tool is None:
            content = failure_result(f"Unknown tool: {name}", tool=name)
            log_tool_result(LOGGER, name, content, success=False)
            return ToolMessage(content=content, tool_call_id=call_id, name=name, status="error")

        try:
            result = await tool.ainvoke(args)
        except Exception as e:
            log_error(LOGGER, e, f"tool '{name}'")
            content = failure_result(f"{type(e).__name__}: {e}", tool=name)
            return ToolMessage(content=content, tool_call_id=call_id, name=name, status="error")

        content = _to_content(result)
        log_tool_result(LOGGER, name, content, success=_reports_success(content))
        return ToolMessage(content=content, tool_call_id=call_id, name=name)


__all__ = ["ToolDispatcher"]
