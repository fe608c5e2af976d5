"""Routing functions for the context-engineering graph.

Routers are pure functions of the state snapshot. Their ``Literal`` return
annotation is the label set the engine validates against each path map at
compile time, so keep it in sync with the builder.
"""

from __future__ import annotations

import logging
from typing import Literal

from contextAgent.graph.state import ThreadState, Verdict
from contextAgent.utils.logging_utils import log_routing_decision

LOGGER = logging.getLogger("contextagent.routing")

PlannerRoute = Literal["runner", "history"]
EvaluatorRoute = Literal["good", "normal", "bad", "give_up"]


def route_planner(state: ThreadState) -> PlannerRoute:
    """Route after the orchestrator.

    Returns the ``planner_route`` the orchestrator stored, as-is. A value
    outside ``{"runner", "history"}`` is not corrected here: the engine
    rejects it with ``RoutingError``.
    """
    decision = state.get("planner_route")
    log_routing_decision(LOGGER, "orchestrator", str(decision), "orchestrator plan decision")
    return decision  # type: ignore[return-value]


def route_evaluator(state: ThreadState) -> EvaluatorRoute:
    """Route after the evaluator.

    Returns:
        "good" / "normal": answer accepted, end the run
        "bad": replan through the orchestrator
        "give_up": verdict is bad but the replan budget is spent
    """
    verdict = state.get("evaluation_verdict", Verdict.UNSET)
    decision = verdict.value if isinstance(verdict, Verdict) else str(verdict)

    if decision == Verdict.BAD.value:
        iterations = state.get("plan_iterations", 0)
        budget = state.get("max_plan_iterations", 3)
        if iterations >= budget:
            log_routing_decision(LOGGER, "evaluator", "give_up", f"bad verdict, replan budget spent ({iterations}/{budget})")
            return "give_up"
        log_routing_decision(LOGGER, "evaluator", decision, f"replanning ({iterations}/{budget})")
        return "bad"

    log_routing_decision(LOGGER, "evaluator", decision, "evaluation verdict")
    return decision  # type: ignore[return-value]


__all__ = ["EvaluatorRoute", "PlannerRoute", "route_evaluator", "route_planner"]
