"""Tests for the planner and evaluator routing functions."""

import pytest
from langchain_core.messages import AIMessage

from contextAgent.graph.engine import router_labels
from contextAgent.graph.routing import route_evaluator, route_planner
from contextAgent.graph.state import Verdict


class TestRoutePlanner:
    @pytest.mark.parametrize("route", ["runner", "history"])
    def test_returns_planner_route(self, route):
        assert route_planner({"planner_route": route}) == route

    def test_ignores_message_content(self):
        state = {"planner_route": "runner", "messages": [AIMessage(content="history")]}
        assert route_planner(state) == "runner"

    def test_unknown_route_passes_through_unchanged(self):
        # The engine turns this into a RoutingError
        assert route_planner({"planner_route": "Runner "}) == "Runner "
        assert route_planner({}) is None

    def test_declared_labels(self):
        assert router_labels(route_planner) == frozenset({"runner", "history"})


class TestRouteEvaluator:
    @pytest.mark.parametrize("verdict, expected", [
        (Verdict.GOOD, "good"),
        (Verdict.NORMAL, "normal"),
    ])
    def test_accepting_verdicts(self, verdict, expected):
        state = {"evaluation_verdict": verdict, "plan_iterations": 5, "max_plan_iterations": 3}
        assert route_evaluator(state) == expected

    def test_bad_within_budget_replans(self):
        state = {"evaluation_verdict": Verdict.BAD, "plan_iterations": 1, "max_plan_iterations": 3}
        assert route_evaluator(state) == "bad"

    def test_bad_with_budget_spent_gives_up(self):
        state = {"evaluation_verdict": Verdict.BAD, "plan_iterations": 3, "max_plan_iterations": 3}
        assert route_evaluator(state) == "give_up"

    def test_unset_verdict_is_not_a_known_label(self):
        assert route_evaluator({}) == "unset"

    def test_declared_labels(self):
        assert router_labels(route_evaluator) == frozenset({"good", "normal", "bad", "give_up"})
