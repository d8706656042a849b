"""
Unit tests for TournamentStateMachine class.
Tests all state transitions, guards, and helper methods.
"""
import pytest
from shared.state_machine import (
    TournamentStateMachine,
    TournamentState,
    TransitionError,
    single_champion_guard
)


class TestTournamentStateEnum:
    """Tests for TournamentState enum."""

    def test_all_states_exist(self):
        """All expected states should exist."""
        assert TournamentState.PENDING.value == "pending"
        assert TournamentState.IN_PROGRESS.value == "in_progress"
        assert TournamentState.COMPLETED.value == "completed"
        assert TournamentState.FAILED.value == "failed"

    def test_state_is_string_enum(self):
        """States should be string enums."""
        assert isinstance(TournamentState.PENDING.value, str)
        assert TournamentState.FAILED == "failed"


class TestTransitionError:
    """Tests for TransitionError exception."""

    def test_error_attributes(self):
        """TransitionError should have from_state and to_state."""
        error = TransitionError("pending", "completed")
        assert error.from_state == "pending"
        assert error.to_state == "completed"

    def test_default_reason(self):
        """Default reason should be generated."""
        error = TransitionError("pending", "completed")
        assert "pending" in str(error)
        assert "completed" in str(error)

    def test_custom_reason(self):
        """Custom reason should be used if provided."""
        error = TransitionError("pending", "completed", "Custom error message")
        assert str(error) == "Custom error message"


class TestStateMachineInit:
    """Tests for TournamentStateMachine initialization."""

    def test_default_initial_state(self):
        """Default initial state should be PENDING."""
        sm = TournamentStateMachine()
        assert sm.state == TournamentState.PENDING
        assert sm.is_terminal is False

    def test_from_state_string_valid(self):
        """from_state_string should create SM with correct state."""
        sm = TournamentStateMachine.from_state_string("in_progress")
        assert sm.state == TournamentState.IN_PROGRESS

    def test_from_state_string_invalid(self):
        """Invalid state string should default to PENDING."""
        sm = TournamentStateMachine.from_state_string("archived")
        assert sm.state == TournamentState.PENDING


class TestStateTransitions:
    """Tests for state transition logic."""

    def test_pending_to_in_progress_start(self):
        """start should transition from PENDING to IN_PROGRESS."""
        sm = TournamentStateMachine()
        assert sm.transition("start") == TournamentState.IN_PROGRESS

    def test_advance_keeps_in_progress(self):
        """advance should keep state at IN_PROGRESS."""
        sm = TournamentStateMachine(TournamentState.IN_PROGRESS)
        assert sm.transition("advance") == TournamentState.IN_PROGRESS

    def test_in_progress_to_completed(self):
        """complete should transition from IN_PROGRESS to COMPLETED."""
        sm = TournamentStateMachine(TournamentState.IN_PROGRESS)
        assert sm.transition("complete") == TournamentState.COMPLETED
        assert sm.is_terminal is True

    def test_pending_can_fail(self):
        """A tournament that never got created goes straight to FAILED."""
        sm = TournamentStateMachine()
        assert sm.transition("fail") == TournamentState.FAILED

    def test_in_progress_can_fail(self):
        """fail should transition from IN_PROGRESS to FAILED."""
        sm = TournamentStateMachine(TournamentState.IN_PROGRESS)
        assert sm.transition("fail") == TournamentState.FAILED
        assert sm.is_terminal is True


class TestInvalidTransitions:
    """Tests for invalid state transitions."""

    def test_cannot_complete_from_pending(self):
        """complete should fail from PENDING state."""
        sm = TournamentStateMachine()
        with pytest.raises(TransitionError):
            sm.transition("complete")
        assert sm.state == TournamentState.PENDING

    def test_terminal_states_are_final(self):
        """No transitions should be possible from COMPLETED or FAILED."""
        for state in (TournamentState.COMPLETED, TournamentState.FAILED):
            sm = TournamentStateMachine(state)
            for action in ["start", "advance", "complete", "fail"]:
                with pytest.raises(TransitionError):
                    sm.transition(action)

    def test_invalid_action_raises_error(self):
        """Unknown action should raise TransitionError."""
        sm = TournamentStateMachine()
        with pytest.raises(TransitionError):
            sm.transition("archive")


class TestGuards:
    """Tests for the champion guard on complete."""

    def test_single_champion_guard(self):
        assert single_champion_guard({"winners": [7]}) is True
        assert single_champion_guard({"winners": [7, 8]}) is False
        assert single_champion_guard({}) is False

    def test_complete_with_one_winner(self):
        """complete passes its guard with exactly one winner."""
        sm = TournamentStateMachine(TournamentState.IN_PROGRESS)
        assert sm.transition("complete", {"winners": [3]}) == TournamentState.COMPLETED

    def test_complete_rejected_with_several_winners(self):
        """complete is refused while more than one team remains."""
        sm = TournamentStateMachine(TournamentState.IN_PROGRESS)
        with pytest.raises(TransitionError) as exc_info:
            sm.transition("complete", {"winners": [3, 4]})

        assert "Guard condition failed" in str(exc_info.value)
        assert sm.state == TournamentState.IN_PROGRESS
