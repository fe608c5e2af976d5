"""Tests for the thread state and the append-only message reducer."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage, ToolMessage

from contextAgent.graph.engine import state_reducers
from contextAgent.graph.state import ThreadState, Verdict, append_messages, create_default_state


def test_append_accepts_single_message_and_sequence():
    first = HumanMessage(content="task")
    log = append_messages(None, first)
    log = append_messages(log, [AIMessage(content="a"), AIMessage(content="b")])

    assert [m.content for m in log] == ["task", "a", "b"]


def test_append_never_removes_or_reorders():
    existing = [HumanMessage(content="1", id="m1"), AIMessage(content="2", id="m2")]
    # Same id again: still appended, the log is not deduplicated
    result = append_messages(existing, [AIMessage(content="2 again", id="m2")])

    assert [m.id for m in result] == ["m1", "m2", "m2"]
    assert result[:2] == existing
    assert len(existing) == 2  # input list untouched


def test_append_none_is_noop():
    existing = [HumanMessage(content="1")]
    assert append_messages(existing, None) == existing


def test_append_assigns_missing_ids():
    log = append_messages([], [AIMessage(content="x"), ToolMessage(content="y", tool_call_id="c1")])
    assert all(m.id for m in log)
    assert log[0].id != log[1].id


def test_append_rejects_non_messages():
    with pytest.raises(TypeError, match="BaseMessage"):
        append_messages([], ["plain string"])


def test_only_messages_field_has_a_reducer():
    reducers = state_reducers(ThreadState)

    assert reducers["messages"] is append_messages
    assert {name for name, reducer in reducers.items() if reducer is None} == {
        "thread_id",
        "task",
        "evaluation_verdict",
        "planner_route",
        "plan_iterations",
        "max_plan_iterations",
        "history_context",
    }


def test_default_state_seeds_task_message():
    state = create_default_state("summarize README.md", thread_id="t1", max_plan_iterations=4)

    assert state["task"] == "summarize README.md"
    assert state["thread_id"] == "t1"
    assert state["evaluation_verdict"] is Verdict.UNSET
    assert state["plan_iterations"] == 0
    assert state["max_plan_iterations"] == 4
    assert state["planner_route"] is None
    assert state["history_context"] == []
    assert len(state["messages"]) == 1
    assert isinstance(state["messages"][0], HumanMessage)
    assert state["messages"][0].content == "summarize README.md"


def test_default_state_without_task_has_empty_log():
    assert create_default_state()["messages"] == []
