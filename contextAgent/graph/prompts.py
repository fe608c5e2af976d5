"""System prompts shared across nodes."""

from datetime import datetime, timezone


def get_current_datetime_tag() -> str:
    """Get current date and time in XML tag format.

    Minute precision keeps the prompt prefix stable within a run.
    """
    now = datetime.now(timezone.utc)
    return f"<current_datetime>{now.strftime('%Y-%m-%d %H:%M UTC')}</current_datetime>"


ORCHESTRATOR_SYSTEM_PROMPT = """You are the orchestrator of a context-engineering agent.

Generate a plan for the task and decide how to continue:
- "runner": work on the task directly. The runner can read and search files in the workspace.
- "history": the task depends on earlier turns of this conversation; rebuild the context first.

If a previous attempt was rated bad, change the plan instead of repeating it.
Answer only with the structured decision."""


RUNNER_SYSTEM_PROMPT = """You are the runner of a context-engineering agent.

Carry out the task. You can get file contents and search the workspace with the bound tools:
{tool_catalog}

Use a tool only when the answer depends on workspace files. When you have enough
information, answer the task directly and concisely."""


EVALUATOR_SYSTEM_PROMPT = """You evaluate the response to the user's task in the conversation below.

Grade the latest answer:
- "good": correct and complete
- "normal": acceptable with minor gaps
- "bad": wrong, incomplete or off-topic; the task should be planned again"""


def build_tool_catalog(tool_registry) -> str:
    """Render the registry as a bullet list (name, category, summary) for the runner prompt."""
    if not len(tool_registry):
        return "- (no tools available)"
    lines = []
    for name in tool_registry.names():
        meta = tool_registry.get_meta(name)
        description = getattr(tool_registry.get_tool(name), "description", "") or ""
        summary = description.strip().splitlines()[0] if description.strip() else ""
        line = f"- {name} [{meta.category}]"
        lines.append(f"{line}: {summary}" if summary else line)
    return "\n".join(lines)


def build_orchestrator_task_message(attempt: int, *, task: str = "") -> str:
    """Human-turn prompt asking for the next step.

    ``task`` is only repeated when the log does not already carry it.
    """
    text = f"Here is the task: {task}" if task else "Plan the next step for the task above."
    if attempt > 1:
        text += f"\n\nThis is attempt {attempt}; the previous answer was rated bad."
    return f"{text}\n\n{get_current_datetime_tag()}"


__all__ = [
    "EVALUATOR_SYSTEM_PROMPT",
    "ORCHESTRATOR_SYSTEM_PROMPT",
    "RUNNER_SYSTEM_PROMPT",
    "build_orchestrator_task_message",
    "build_tool_catalog",
    "get_current_datetime_tag",
]
