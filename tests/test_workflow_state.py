"""Tests for WorkflowState and Edge."""

from agentflow import Edge, WorkflowState

from sample_nodes import FinishNode, StartNode


def test_workflow_state_data_management():
    state = WorkflowState()

    state.set("key1", "value1")
    state.set("key2", 42)

    assert state.get("key1") == "value1"
    assert state.get("key2") == 42
    assert state.get("nonexistent", "default") == "default"
    assert state.get("nonexistent") is None
    assert state.has("key1")
    assert not state.has("nonexistent")
    assert state.all() == {"key1": "value1", "key2": 42}


def test_state_all_is_a_snapshot():
    state = WorkflowState({"a": 1})

    snapshot = state.all()
    snapshot["b"] = 2

    assert not state.has("b")


def test_state_merge_unset_and_copy():
    state = WorkflowState({"a": 1, "b": 2})

    state.merge({"b": 3, "c": 4}).unset("a").unset("missing")
    clone = state.copy().set("d", 5)

    assert state.all() == {"b": 3, "c": 4}
    assert clone.all() == {"b": 3, "c": 4, "d": 5}
    assert WorkflowState({"x": 1}).merge(WorkflowState({"y": 2})).all() == {"x": 1, "y": 2}


def test_state_protocol():
    state = WorkflowState({"a": 1, "b": 2})

    assert "a" in state
    assert len(state) == 2
    assert list(state) == ["a", "b"]
    assert state == WorkflowState({"a": 1, "b": 2})
    assert state != WorkflowState({"a": 1})


def test_edge_condition_evaluation():
    state = WorkflowState()
    state.set("test_value", True)

    edge = Edge(StartNode, FinishNode, lambda s: s.get("test_value", False))

    assert edge.should_execute(state)
    assert edge.is_conditional

    state.set("test_value", False)
    assert not edge.should_execute(state)


def test_edge_without_condition():
    edge = Edge(StartNode, FinishNode)

    assert edge.should_execute(WorkflowState())
    assert edge.should_execute(WorkflowState({"anything": None}))
    assert not edge.is_conditional


def test_edge_endpoints_are_normalized():
    assert (Edge(StartNode, FinishNode()).source, Edge(StartNode, FinishNode()).target) == (
        "StartNode",
        "FinishNode",
    )
    assert Edge("a", "b").source == "a"


def test_edge_condition_result_is_coerced_to_bool():
    edge = Edge("a", "b", lambda s: s.get("items"))

    assert edge.should_execute(WorkflowState({"items": [1]})) is True
    assert edge.should_execute(WorkflowState({"items": []})) is False
