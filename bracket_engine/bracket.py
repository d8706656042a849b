"""
Single elimination bracket advancement.
"""
from typing import List, Sequence, Union

from shared.errors import BracketInconsistency
from .models import MatchResult, MatchUp, TournamentComplete


def is_valid_bracket_size(teams_per_match: int, total_teams: int) -> bool:
    """True when total_teams is teams_per_match ** k for some k >= 1."""
    if teams_per_match < 2 or total_teams < teams_per_match:
        return False
    while total_teams % teams_per_match == 0:
        total_teams //= teams_per_match
    return total_teams == 1


def count_rounds(teams_per_match: int, total_teams: int) -> int:
    """Number of rounds needed to reduce total_teams to a champion."""
    rounds = 0
    while total_teams > 1:
        total_teams //= teams_per_match
        rounds += 1
    return rounds


def group_match_ups(team_ids: Sequence[int], teams_per_match: int) -> List[MatchUp]:
    """Consecutive groups of teams_per_match ids, group g at match_index g."""
    if not team_ids or len(team_ids) % teams_per_match != 0:
        raise BracketInconsistency(len(team_ids), teams_per_match)

    return [
        MatchUp(
            match_index=g,
            team_ids=tuple(team_ids[start:start + teams_per_match])
        )
        for g, start in enumerate(range(0, len(team_ids), teams_per_match))
    ]


def advance(results: Sequence[MatchResult], teams_per_match: int) -> Union[List[MatchUp], TournamentComplete]:
    winners = [r.winning_team_id for r in sorted(results, key=lambda r: r.match_index)]

    if len(winners) == 1:
        return TournamentComplete(champion_id=winners[0])

    return group_match_ups(winners, teams_per_match)
