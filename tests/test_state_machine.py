"""
Tests for declarative state machines and ObservableState.
"""

import dataclasses
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reaktiv import Computed

from reactive.observable import ObservableState
from reactive.state_machine import StateMachine, Transition, InvalidTransition, GuardFailure


class Door(StateMachine):
    initial = "SHUT"
    transitions = [
        Transition("SHUT", "AJAR"),
        Transition("AJAR", "SHUT"),
        Transition("AJAR", "LOCKED", guard=lambda ctx: ctx and ctx.get("key")),
        Transition("LOCKED", "AJAR"),
        Transition("SHUT", "BROKEN"),
    ]


# ── StateMachine table ──────────────────────────────────────────────────────

class TestStateMachine:
    def test_edges_carry_only_a_guard(self):
        names = [f.name for f in dataclasses.fields(Transition)]
        assert names == ["from_state", "to_state", "guard"]

    def test_allowed_transitions(self):
        assert Door.allowed_transitions("SHUT") == ["AJAR", "BROKEN"]
        assert Door.allowed_transitions("BROKEN") == []

    def test_missing_edge(self):
        with pytest.raises(InvalidTransition) as exc:
            Door.validate_transition("SHUT", "LOCKED")
        assert exc.value.allowed == ["AJAR", "BROKEN"]

    def test_guard_failure(self):
        with pytest.raises(GuardFailure):
            Door.validate_transition("AJAR", "LOCKED", {"key": False})
        with pytest.raises(GuardFailure):
            Door.validate_transition("AJAR", "LOCKED", None)

    def test_guard_pass(self):
        t = Door.validate_transition("AJAR", "LOCKED", {"key": True})
        assert t.to_state == "LOCKED"

    def test_can_transition(self):
        assert Door.can_transition("SHUT", "AJAR")
        assert not Door.can_transition("SHUT", "LOCKED")
        assert not Door.can_transition("AJAR", "LOCKED", {})


# ── ObservableState ─────────────────────────────────────────────────────────

class TestObservableState:
    def test_initial(self):
        state = ObservableState(Door)
        assert state.value == "SHUT"
        assert state() == "SHUT"

    def test_explicit_initial(self):
        assert ObservableState(Door, "AJAR").value == "AJAR"

    def test_rejects_non_machine(self):
        with pytest.raises(TypeError):
            ObservableState(object)

    def test_transition_returns_previous(self):
        state = ObservableState(Door)
        assert state.transition("AJAR") == "SHUT"
        assert state.value == "AJAR"

    def test_invalid_transition_keeps_state(self):
        state = ObservableState(Door)
        with pytest.raises(InvalidTransition):
            state.transition("LOCKED")
        assert state.value == "SHUT"

    def test_guard_failure_keeps_state(self):
        state = ObservableState(Door, "AJAR")
        with pytest.raises(GuardFailure):
            state.transition("LOCKED", {"key": False})
        assert state.value == "AJAR"
        state.transition("LOCKED", {"key": True})
        assert state.value == "LOCKED"

    def test_subscribers_notified(self):
        state = ObservableState(Door)
        seen = []
        state.subscribe(lambda f, t: seen.append((f, t)))
        state.transition("AJAR")
        state.transition("SHUT")
        assert seen == [("SHUT", "AJAR"), ("AJAR", "SHUT")]

    def test_unsubscribe(self):
        state = ObservableState(Door)
        seen = []
        unsubscribe = state.subscribe(lambda f, t: seen.append(t))
        unsubscribe()
        unsubscribe()
        state.transition("AJAR")
        assert seen == []

    def test_bad_subscriber_does_not_break_others(self):
        state = ObservableState(Door)
        seen = []
        state.subscribe(lambda f, t: 1 / 0)
        state.subscribe(lambda f, t: seen.append(t))
        state.transition("AJAR")
        assert seen == ["AJAR"]

    def test_computed_tracks_signal(self):
        state = ObservableState(Door)
        is_open = Computed(lambda: state() != "SHUT")
        assert is_open() is False
        state.transition("AJAR")
        assert is_open() is True
