from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from shared.state_machine import TournamentStateMachine, TournamentState


@dataclass(frozen=True)
class MatchUp:
    match_index: int
    team_ids: Tuple[int, ...]

    def to_dict(self) -> dict:
        return {
            'match_index': self.match_index,
            'team_ids': list(self.team_ids),
        }


@dataclass(frozen=True)
class TeamRecord:
    team_id: int
    name: str
    score: float


@dataclass(frozen=True)
class MatchResult:
    match_index: int
    winning_team_id: int
    winning_score: float

    def to_dict(self) -> dict:
        return {
            'match_index': self.match_index,
            'winning_team_id': self.winning_team_id,
            'winning_score': self.winning_score,
        }


@dataclass(frozen=True)
class TournamentComplete:
    champion_id: int


@dataclass(frozen=True)
class CreatedTournament:
    """What the remote service hands back when a tournament is created."""
    tournament_id: str
    match_ups: Tuple[MatchUp, ...]


@dataclass
class Round:
    round_index: int
    match_ups: List[MatchUp]
    results: List[MatchResult] = field(default_factory=list)

    @property
    def winners(self) -> List[int]:
        return [r.winning_team_id for r in self.results]


@dataclass
class Tournament:
    tournament_id: Optional[str]
    teams_per_match: int
    total_teams: int
    current_round: int = 0
    rounds: List[Round] = field(default_factory=list)
    champion_id: Optional[int] = None
    state_machine: TournamentStateMachine = field(default_factory=TournamentStateMachine)

    @property
    def status(self) -> TournamentState:
        return self.state_machine.state

    def to_dict(self) -> dict:
        return {
            'tournament_id': self.tournament_id,
            'teams_per_match': self.teams_per_match,
            'total_teams': self.total_teams,
            'current_round': self.current_round,
            'status': self.status.value,
            'champion_id': self.champion_id,
            'rounds_played': len(self.rounds),
        }
