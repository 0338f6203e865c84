"""Tests for workflow state management.

This module tests:
- Key declaration and defaults
- REPLACE and APPEND merge strategies
- Initial value handling
- Read-only snapshots
"""

import pytest

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.state import (
    CURRENT_NODE,
    NEXT_NODE,
    MergeStrategy,
    NodeStatus,
    StateKey,
    WorkflowState
)


@pytest.fixture
def state_keys():
    return [
        StateKey(name="question"),
        StateKey(name="findings", merge_strategy=MergeStrategy.APPEND),
        StateKey(name="score", default=0),
    ]


@pytest.fixture
def state(state_keys) -> WorkflowState:
    return WorkflowState.create(state_keys)


class TestStateDefaults:
    """Test reads of unset keys."""

    def test_declared_default(self, state: WorkflowState):
        assert state.get("score") == 0

    def test_append_key_defaults_to_empty_list(self, state: WorkflowState):
        assert state.get("findings") == []

    def test_unknown_key_is_none(self, state: WorkflowState):
        assert state.get("missing") is None

    def test_explicit_default_wins(self, state: WorkflowState):
        assert state.get("question", "fallback") == "fallback"

    def test_engine_keys_registered(self, state: WorkflowState):
        assert NEXT_NODE in state.keys
        assert CURRENT_NODE in state.keys


class TestMergeStrategies:
    """Test how writes combine with existing values."""

    def test_replace(self, state: WorkflowState):
        state.set("question", "first")
        state.set("question", "second")
        assert state.get("question") == "second"

    def test_append_extends_lists(self, state: WorkflowState):
        state.set("findings", ["a", "b"])
        state.set("findings", ["c"])
        assert state.get("findings") == ["a", "b", "c"]

    def test_append_wraps_scalars(self, state: WorkflowState):
        state.set("findings", "a")
        state.set("findings", "b")
        assert state.get("findings") == ["a", "b"]

    def test_undeclared_key_replaces(self, state: WorkflowState):
        state.set("scratch", 1)
        state.set("scratch", 2)
        assert state.get("scratch") == 2

    def test_update_applies_in_order(self, state: WorkflowState):
        state.update({"findings": ["x"], "score": 40})
        state.update({"findings": ["y"], "score": 90})
        assert state.get("findings") == ["x", "y"]
        assert state.get("score") == 90

    def test_update_accepts_none(self, state: WorkflowState):
        state.update(None)
        assert state.data == {}


class TestInitialValues:
    """Test state creation with initial values."""

    def test_known_keys_are_set(self, state_keys):
        state = WorkflowState.create(state_keys, {"question": "why?", "findings": ["seed"]})
        assert state.get("question") == "why?"
        assert state.get("findings") == ["seed"]

    def test_unknown_keys_ignored(self, state_keys):
        state = WorkflowState.create(state_keys, {"question": "why?", "bogus": 1})
        assert "bogus" not in state.data

    def test_unknown_keys_rejected_when_strict(self, state_keys):
        with pytest.raises(ConfigurationError):
            WorkflowState.create(state_keys, {"bogus": 1}, strict=True)

    def test_initial_values_are_copied(self, state_keys):
        seed = ["seed"]
        state = WorkflowState.create(state_keys, {"findings": seed})
        state.set("findings", ["more"])
        assert seed == ["seed"]


class TestSnapshot:
    """Test read-only snapshots."""

    def test_snapshot_is_read_only(self, state: WorkflowState):
        state.set("question", "q")
        snapshot = state.snapshot()
        with pytest.raises(TypeError):
            snapshot["question"] = "changed"

    def test_snapshot_fills_unset_keys(self, state: WorkflowState):
        state.set("question", "q")
        snapshot = state.snapshot()
        assert snapshot["question"] == "q"
        assert snapshot["findings"] == []
        assert snapshot["score"] == 0
        assert snapshot[NEXT_NODE] is None
        assert "undeclared" not in snapshot

    def test_snapshot_is_detached(self, state: WorkflowState):
        state.set("findings", ["a"])
        snapshot = state.snapshot()
        snapshot["findings"].append("sneaky")
        assert state.get("findings") == ["a"]

    def test_status_and_visits(self, state: WorkflowState):
        state.mark_status("n", NodeStatus.RUNNING)
        assert state.status["n"] == NodeStatus.RUNNING
        assert state.record_visit("n") == 1
        assert state.record_visit("n") == 2
        assert state.visits("n") == 2
        assert state.visits("other") == 0
