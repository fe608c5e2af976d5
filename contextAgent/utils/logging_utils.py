"""Logging utilities for ContextAgent."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "contextagent"


def setup_logging(
    level: int = logging.INFO,
    log_dir: str | Path = "logs",
    console_level: int = logging.WARNING,
) -> logging.Logger:
    """Setup logging configuration for ContextAgent.

    A timestamped file handler receives everything at ``level`` and above,
    the console only shows warnings and errors.

    Args:
        level: File logging level (default: INFO)
        log_dir: Directory for log files
        console_level: Console logging level (default: WARNING)

    Returns:
        Configured logger instance
    """
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"contextagent_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("ContextAgent session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def log_routing_decision(logger: logging.Logger, from_node: str, decision: str, reason: str = "") -> None:
    """Log routing decision.

    Args:
        logger: Logger instance
        from_node: Source node making the decision
        decision: Routing label
        reason: Reason for the routing decision
    """
    logger.info(f"Routing decision from {from_node}: → {decision}")
    if reason:
        logger.info(f"  → Reason: {reason}")


def log_node_entry(logger: logging.Logger, node_name: str, state: Dict[str, Any]) -> None:
    """Log node entry with a short state snapshot."""
    thread_id = state.get("thread_id") or "N/A"
    logger.info(f"# ENTERING NODE: {node_name}")
    logger.info(f"  - thread_id: {thread_id[:8]}...")
    logger.info(f"  - messages: {len(state.get('messages', []))}")
    logger.info(f"  - verdict: {state.get('evaluation_verdict')}")
    logger.info(f"  - plan iterations: {state.get('plan_iterations', 0)}/{state.get('max_plan_iterations')}")


def log_node_exit(logger: logging.Logger, node_name: str, updates: Optional[Dict[str, Any]]) -> None:
    """Log node exit with state updates."""
    logger.info(f"# EXITING NODE: {node_name}")
    for key, value in (updates or {}).items():
        if key in ("messages", "history_context"):
            count = len(value) if isinstance(value, (list, tuple)) else 1
            logger.info(f"  - {key}: +{count} message(s)")
        else:
            logger.info(f"  - {key}: {value}")


def log_tool_call(logger: logging.Logger, tool_name: str, args: Dict[str, Any]) -> None:
    """Log tool invocation."""
    logger.info(f"Tool call: {tool_name}")
    logger.debug(f"  Arguments: {json.dumps(args, ensure_ascii=False, default=str)}")


def log_tool_result(logger: logging.Logger, tool_name: str, result: Any, success: bool = True) -> None:
    """Log tool execution result (truncated preview)."""
    status = "✓ Success" if success else "✗ Failed"
    logger.info(f"Tool result: {tool_name} - {status}")

    result_str = str(result)
    if len(result_str) > 500:
        result_str = result_str[:500] + "... (truncated)"
    logger.debug(f"  Result: {result_str}")


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log error with context and traceback."""
    logger.error(f"Error occurred: {type(error).__name__}: {error}")
    if context:
        logger.error(f"  Context: {context}")
    logger.debug("Full traceback:", exc_info=error)


def log_user_message(logger: logging.Logger, content: str) -> None:
    """Log user input."""
    logger.info(f"User input: {content[:100]}{'...' if len(content) > 100 else ''}")


def log_agent_response(logger: logging.Logger, content: str) -> None:
    """Log agent response."""
    logger.info(f"Agent response: {content[:100]}{'...' if len(content) > 100 else ''}")
