"""Graph node builders."""

from .evaluator import EvaluationResult, build_evaluator_node
from .history import build_history_merge_node, merge_message_histories
from .message_opt import build_message_optimizer_node
from .orchestrator import PlanDecision, build_orchestrator_node
from .runner import build_runner_node

__all__ = [
    "EvaluationResult",
    "PlanDecision",
    "build_evaluator_node",
    "build_history_merge_node",
    "build_message_optimizer_node",
    "build_orchestrator_node",
    "build_runner_node",
    "merge_message_histories",
]
