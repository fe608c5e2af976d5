"""Command-line interface for the context-engineering agent.

Usage:
    # Single query
    python main.py "Explain what contextAgent/graph/engine.py does"

    # Interactive mode (default when no query is given)
    python main.py
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import uuid
from typing import Awaitable, Callable, Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

from contextAgent.agent import ContextEngineeringAgent
from contextAgent.config import get_settings
from contextAgent.graph.message_utils import is_route_message
from contextAgent.utils import ContextAgentError, log_error, setup_logging

LOGGER = logging.getLogger("contextagent.cli")


def _describe(message: BaseMessage) -> str:
    if is_route_message(message):
        return f"[route] {message.content}"
    if isinstance(message, HumanMessage):
        return f"You> {message.content}"
    if isinstance(message, ToolMessage):
        return f"[tool:{message.name}] {str(message.content)[:200]}"
    if isinstance(message, AIMessage):
        calls = ", ".join(tc["name"] for tc in message.tool_calls)
        text = str(message.content) or f"(tool calls: {calls})"
        return f"Agent> {text}"
    return f"[{message.type}] {message.content}"


class AgentCLI:
    """Interactive loop over one conversation thread."""

    COMMANDS: Dict[str, str] = {
        "/quit, /exit": "Exit",
        "/help": "Show this help",
        "/new": "Start a new thread",
        "/history": "Show the message log of the current thread",
        "/threads": "List threads that have checkpoints",
        "/resume <id>": "Resume an abandoned run (thread id prefix)",
    }

    def __init__(self, agent: ContextEngineeringAgent):
        self.agent = agent
        self.thread_id = str(uuid.uuid4())
        self._handlers: Dict[str, Callable[[Optional[str]], Awaitable[bool]]] = {
            "/quit": self._handle_quit,
            "/exit": self._handle_quit,
            "/help": self._handle_help,
            "/new": self._handle_new,
            "/history": self._handle_history,
            "/threads": self._handle_threads,
            "/resume": self._handle_resume,
        }

    def print_welcome(self) -> None:
        print("Context Engineering Agent ready.")
        print(f"Thread ID: {self.thread_id[:8]}...")
        print("Type /help for commands.\n")

    async def run(self) -> None:
        self.print_welcome()
        loop = asyncio.get_running_loop()

        while True:
            try:
                user_input = await loop.run_in_executor(None, lambda: input("You> ").strip())
            except (KeyboardInterrupt, EOFError):
                print("\nBye!")
                LOGGER.info("Session interrupted by user")
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                if not await self.handle_command(user_input):
                    break
                continue

            await self.handle_user_message(user_input)

    async def handle_command(self, text: str) -> bool:
        """Dispatch a slash command; return False to leave the loop."""
        parts = text.split(maxsplit=1)
        handler = self._handlers.get(parts[0].lower())
        if handler is None:
            print(f"Unknown command: {parts[0]} (type /help)")
            return True
        return await handler(parts[1] if len(parts) > 1 else None)

    async def handle_user_message(self, task: str) -> None:
        try:
            answer = await self.agent.run(task, thread_id=self.thread_id)
        except ContextAgentError as e:
            log_error(LOGGER, e, f"thread {self.thread_id}")
            print(f"Error: {e.user_message}")
            print(f"Use /resume {self.thread_id[:8]} to continue from the last checkpoint.\n")
            return
        print(f"Agent> {answer}\n")

    # ========== Command Handlers ==========

    async def _handle_quit(self, arg: Optional[str]) -> bool:
        print("Session ended.")
        return False

    async def _handle_help(self, arg: Optional[str]) -> bool:
        print("\nCommands:")
        for cmd, desc in self.COMMANDS.items():
            print(f"  {cmd:<16} {desc}")
        print()
        return True

    async def _handle_new(self, arg: Optional[str]) -> bool:
        self.thread_id = str(uuid.uuid4())
        print(f"New thread: {self.thread_id[:8]}...\n")
        return True

    async def _handle_history(self, arg: Optional[str]) -> bool:
        checkpoints = self.agent.history(self.thread_id)
        if not checkpoints:
            print("No history for this thread yet.\n")
            return True
        latest = checkpoints[-1]
        print(f"\n{len(checkpoints)} checkpoint(s), last after '{latest.node}':")
        for message in latest.state.get("messages", []):
            print(f"  {_describe(message)}")
        print()
        return True

    async def _handle_threads(self, arg: Optional[str]) -> bool:
        threads = self.agent.threads()
        if not threads:
            print("No saved threads.\n")
            return True
        for i, thread_id in enumerate(threads, 1):
            marker = " (current)" if thread_id == self.thread_id else ""
            print(f"{i}. {thread_id}{marker}")
        print()
        return True

    async def _handle_resume(self, prefix: Optional[str]) -> bool:
        if not prefix:
            print("Usage: /resume <thread id prefix>\n")
            return True

        matching: List[str] = [tid for tid in self.agent.threads() if tid.startswith(prefix)]
        if len(matching) != 1:
            print(f"{len(matching)} thread(s) match '{prefix}', give a longer prefix.\n")
            return True

        self.thread_id = matching[0]
        try:
            answer = await self.agent.resume(self.thread_id)
        except ContextAgentError as e:
            log_error(LOGGER, e, f"resume {self.thread_id}")
            print(f"Error: {e.user_message}\n")
            return True
        print(f"Agent> {answer}\n")
        return True


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Context Engineering Agent: plan, run and evaluate tasks over your workspace",
    )
    parser.add_argument("query", nargs="*", help="Task to run once (interactive mode when omitted)")
    parser.add_argument("--thread", help="Thread id to run the query on")
    parser.add_argument("--workspace", help="Workspace root for the file tools (AGENT_WORKSPACE_PATH)")
    return parser.parse_args(argv)


async def async_main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    if args.workspace:
        settings.workspace_path = args.workspace

    setup_logging(
        level=getattr(logging, settings.observability.log_level.upper(), logging.INFO),
        log_dir=settings.observability.log_dir,
    )

    try:
        agent = ContextEngineeringAgent(settings)
    except RuntimeError as e:
        print(f"Error: {e}")
        return 1

    if args.query:
        task = " ".join(args.query)
        try:
            answer = await agent.run(task, thread_id=args.thread)
        except ContextAgentError as e:
            log_error(LOGGER, e, "single query")
            print(f"Error: {e.user_message}")
            return 1
        print(answer)
        return 0

    cli = AgentCLI(agent)
    if args.thread:
        cli.thread_id = args.thread
    await cli.run()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    return asyncio.run(async_main(argv))


__all__ = ["AgentCLI", "async_main", "main", "parse_args"]
