"""End-to-end runs of ContextEngineeringAgent with a scripted model.

The scripted model replays one queue of chat responses (runner and message
optimizer) and one queue of structured outputs (orchestrator plan, then
evaluator grade, in call order).
"""

import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage, ToolMessage

from contextAgent.agent import ContextEngineeringAgent
from contextAgent.graph import END, Verdict, build_agent_graph
from contextAgent.graph.engine import router_labels
from contextAgent.graph.message_utils import is_route_message
from contextAgent.persistence import MemoryCheckpointStore
from contextAgent.tools import ToolRegistry
from contextAgent.utils.error_handler import ModelInvocationError, RoutingError


def _plan(label, plan=""):
    return {"next_step": label, "plan": plan}


def _grade(grade):
    return {"grade": grade, "reason": f"rated {grade}"}


def _count(model, schema_name):
    return sum(1 for name, _ in model.structured_calls if name == schema_name)


@pytest.fixture
def make_agent(settings):
    def factory(model):
        return ContextEngineeringAgent(settings, model=model, checkpointer=MemoryCheckpointStore())
    return factory


class TestGraphStructure:
    def test_nodes_and_branches(self, scripted_model, checkpointer):
        app = build_agent_graph(model=scripted_model(), tool_registry=ToolRegistry(), checkpointer=checkpointer)

        assert set(app.nodes) == {"orchestrator", "runner", "history_merge", "message_optimizer", "evaluator"}
        assert app.entry_point == "orchestrator"
        assert app.edges == {
            "runner": "evaluator",
            "history_merge": "message_optimizer",
            "message_optimizer": "evaluator",
        }
        assert app.branches["orchestrator"].path_map == {"runner": "runner", "history": "history_merge"}
        assert app.branches["evaluator"].path_map == {
            "good": END,
            "normal": END,
            "bad": "orchestrator",
            "give_up": END,
        }
        assert router_labels(app.branches["evaluator"].router) == frozenset(app.branches["evaluator"].path_map)

    def test_structured_output_method_comes_from_settings(self, scripted_model, settings):
        settings.models.structured_output_method = "json_mode"
        model = scripted_model()

        ContextEngineeringAgent(settings, model=model, checkpointer=MemoryCheckpointStore())

        assert model.structured_methods == {"PlanDecision": "json_mode", "EvaluationResult": "json_mode"}


class TestScenarios:
    @pytest.mark.asyncio
    async def test_tool_call_then_summary(self, scripted_model, tool_call_message, make_agent):
        model = scripted_model(
            responses=[
                tool_call_message("read_file", {"file_path": "README.md"}, call_id="call_readme"),
                AIMessage(content="README.md describes a tiny demo project."),
            ],
            structured=[_plan("runner", "read README.md and summarize"), _grade("good")],
        )
        agent = make_agent(model)

        answer = await agent.run("Summarize README.md", thread_id="thread-a")

        assert answer == "README.md describes a tiny demo project."
        state = agent.history("thread-a")[-1].state
        assert state["evaluation_verdict"] == Verdict.GOOD
        tool_messages = [m for m in state["messages"] if isinstance(m, ToolMessage)]
        assert len(tool_messages) == 1
        assert tool_messages[0].tool_call_id == "call_readme"
        assert json.loads(tool_messages[0].content)["content"].startswith("# Demo project")

    @pytest.mark.asyncio
    async def test_bad_verdict_replans_with_prior_attempt_in_log(self, scripted_model, make_agent):
        model = scripted_model(
            responses=[AIMessage(content="first answer"), AIMessage(content="second answer")],
            structured=[_plan("runner"), _grade("bad"), _plan("runner"), _grade("good")],
        )
        agent = make_agent(model)

        state = await agent.invoke("Explain src/app.py", thread_id="thread-b")

        assert _count(model, "PlanDecision") == 2
        assert state["plan_iterations"] == 2
        assert state["evaluation_verdict"] == Verdict.GOOD

        _, second_plan_prompt = [c for c in model.structured_calls if c[0] == "PlanDecision"][1]
        assert "first answer" in [m.content for m in second_plan_prompt]

        contents = [m.content for m in state["messages"] if not is_route_message(m)]
        assert contents == ["Explain src/app.py", "first answer", "second answer"]

    @pytest.mark.asyncio
    async def test_unmapped_route_label_is_fatal(self, scripted_model, make_agent):
        model = scripted_model(structured=[_plan("web_search")])
        agent = make_agent(model)

        with pytest.raises(RoutingError) as exc_info:
            await agent.run("Find the docs", thread_id="thread-c")

        assert exc_info.value.label == "web_search"
        assert exc_info.value.known_labels == ["history", "runner"]
        assert model.calls == []
        # The orchestrator's step was still checkpointed
        assert agent.history("thread-c")[-1].node == "orchestrator"

    @pytest.mark.asyncio
    async def test_answer_without_tools(self, scripted_model, make_agent):
        model = scripted_model(
            responses=[AIMessage(content="Paris.")],
            structured=[_plan("runner"), _grade("normal")],
        )
        agent = make_agent(model)

        state = await agent.invoke("What is the capital of France?", thread_id="thread-d")

        messages = state["messages"]
        assert isinstance(messages[0], HumanMessage)
        assert is_route_message(messages[1])
        assert messages[2].content == "Paris."
        assert len(messages) == 3
        assert len(model.calls) == 1

    @pytest.mark.asyncio
    async def test_gives_up_when_replan_budget_is_spent(self, scripted_model, make_agent):
        # MAX_PLAN_ITERATIONS=2 in the settings fixture
        model = scripted_model(
            responses=[AIMessage(content="try 1"), AIMessage(content="try 2")],
            structured=[_plan("runner"), _grade("bad"), _plan("runner"), _grade("bad")],
        )
        agent = make_agent(model)

        state = await agent.invoke("An impossible task", thread_id="thread-e")

        assert _count(model, "PlanDecision") == 2
        assert state["evaluation_verdict"] == Verdict.BAD
        assert state["plan_iterations"] == 2
        assert model.structured == []


class TestCheckpoints:
    @pytest.mark.asyncio
    async def test_log_grows_monotonically(self, scripted_model, tool_call_message, make_agent):
        model = scripted_model(
            responses=[
                tool_call_message("search_files", {"pattern": "*.py"}),
                AIMessage(content="Two Python files: src/app.py and src/utils.py."),
            ],
            structured=[_plan("runner"), _grade("good")],
        )
        agent = make_agent(model)

        await agent.run("List the Python files", thread_id="thread-m")

        checkpoints = agent.history("thread-m")
        assert [c.sequence_number for c in checkpoints] == list(range(len(checkpoints)))
        assert [c.node for c in checkpoints] == ["__start__", "orchestrator", "runner", "evaluator"]

        logs = [[m.id for m in c.state["messages"]] for c in checkpoints]
        for earlier, later in zip(logs, logs[1:]):
            assert later[:len(earlier)] == earlier

    @pytest.mark.asyncio
    async def test_resume_after_model_failure(self, scripted_model, make_agent):
        model = scripted_model(
            responses=[RuntimeError("Request timeout"), AIMessage(content="recovered answer")],
            structured=[_plan("runner"), _grade("good")],
        )
        agent = make_agent(model)

        with pytest.raises(ModelInvocationError) as exc_info:
            await agent.run("Describe the project", thread_id="thread-r")
        assert exc_info.value.user_message == "The model timed out, please retry"
        assert agent.history("thread-r")[-1].node == "orchestrator"

        answer = await agent.resume("thread-r")

        assert answer == "recovered answer"
        assert _count(model, "PlanDecision") == 1
        assert agent.history("thread-r")[-1].node == "evaluator"

    @pytest.mark.asyncio
    async def test_resume_finished_thread_is_a_no_op(self, scripted_model, make_agent):
        model = scripted_model(
            responses=[AIMessage(content="done")],
            structured=[_plan("runner"), _grade("good")],
        )
        agent = make_agent(model)
        await agent.run("Say done", thread_id="thread-f")
        checkpoint_count = len(agent.history("thread-f"))

        assert await agent.resume("thread-f") == "done"
        assert len(agent.history("thread-f")) == checkpoint_count

    @pytest.mark.asyncio
    async def test_resume_unknown_thread(self, scripted_model, make_agent):
        agent = make_agent(scripted_model())

        with pytest.raises(ValueError, match="No checkpoint"):
            await agent.resume("missing")


class TestHistoryBranch:
    @pytest.mark.asyncio
    async def test_second_turn_sees_first_turn(self, scripted_model, make_agent):
        model = scripted_model(
            responses=[
                AIMessage(content="It describes a tiny demo project."),
                AIMessage(content="You asked about README.md."),
            ],
            structured=[_plan("runner"), _grade("good"), _plan("history"), _grade("good")],
        )
        agent = make_agent(model)

        await agent.run("What is in README.md?", thread_id="thread-h")
        answer = await agent.run("Which file did I ask about?", thread_id="thread-h")

        assert answer == "You asked about README.md."
        optimizer_prompt = model.calls[-1]
        assert [m.content for m in optimizer_prompt] == [
            "What is in README.md?",
            "It describes a tiny demo project.",
            "Which file did I ask about?",
        ]
        assert agent.threads() == ["thread-h"]

        # The second run starts a fresh log; the merged view lives in history_context
        final_state = agent.history("thread-h")[-1].state
        assert [m.content for m in final_state["messages"] if not is_route_message(m)] == [
            "Which file did I ask about?",
            "You asked about README.md.",
        ]
