from enum import Enum
from typing import Optional, Callable
from dataclasses import dataclass


class TournamentState(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = (TournamentState.COMPLETED, TournamentState.FAILED)


class TransitionError(Exception):
    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from {from_state} to {to_state}"
        super().__init__(self.reason)


@dataclass
class Transition:
    from_state: TournamentState
    to_state: TournamentState
    action: str
    guard: Optional[Callable] = None


def single_champion_guard(context: dict) -> bool:
    winners = context.get("winners", [])
    return len(winners) == 1


class TournamentStateMachine:
    TRANSITIONS = [
        Transition(TournamentState.PENDING, TournamentState.IN_PROGRESS, "start"),
        Transition(TournamentState.PENDING, TournamentState.FAILED, "fail"),
        Transition(TournamentState.IN_PROGRESS, TournamentState.IN_PROGRESS, "advance"),
        Transition(TournamentState.IN_PROGRESS, TournamentState.COMPLETED, "complete", single_champion_guard),
        Transition(TournamentState.IN_PROGRESS, TournamentState.FAILED, "fail"),
    ]

    def __init__(self, initial_state: TournamentState = TournamentState.PENDING):
        self._state = initial_state

    @property
    def state(self) -> TournamentState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def transition(self, action: str, guard_context: dict = None) -> TournamentState:
        for t in self.TRANSITIONS:
            if t.from_state == self._state and t.action == action:
                if t.guard and guard_context is not None:
                    if not t.guard(guard_context):
                        raise TransitionError(
                            self._state.value,
                            t.to_state.value,
                            f"Guard condition failed for action '{action}'"
                        )

                self._state = t.to_state
                return self._state

        raise TransitionError(
            self._state.value,
            "unknown",
            f"No valid transition for action '{action}' from state '{self._state.value}'"
        )

    @classmethod
    def from_state_string(cls, state_str: str) -> "TournamentStateMachine":
        try:
            state = TournamentState(state_str)
        except ValueError:
            state = TournamentState.PENDING
        return cls(initial_state=state)
