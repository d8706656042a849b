import asyncio
import logging
from typing import Dict

from shared.errors import Inconsistency, MatchFailure
from .models import MatchResult, MatchUp
from .team_cache import TeamScoreCache

logger = logging.getLogger(__name__)


def pick_winner(team_ids, scores: Dict[int, float], winning_score, match_index: int) -> int:
    """Lowest team id whose score equals the winning score."""
    for team_id in sorted(team_ids):
        if scores[team_id] == winning_score:
            return team_id
    raise Inconsistency(match_index, winning_score, scores)


class MatchResolver:
    def __init__(self, client, cache: TeamScoreCache):
        self.client = client
        self.cache = cache

    async def resolve(self, tournament_id: str, round_index: int, match_up: MatchUp) -> MatchResult:
        try:
            return await self._resolve(tournament_id, round_index, match_up)
        except MatchFailure:
            raise
        except Exception as e:
            raise MatchFailure(match_up.match_index, e) from e

    async def _resolve(self, tournament_id: str, round_index: int, match_up: MatchUp) -> MatchResult:
        match_score, *teams = await asyncio.gather(
            self.client.get_match_score(tournament_id, round_index, match_up.match_index),
            *[self.cache.lookup(tournament_id, team_id) for team_id in match_up.team_ids]
        )
        # Keyed by the ids we asked for, not whatever id the service echoes back
        scores = {team_id: team.score for team_id, team in zip(match_up.team_ids, teams)}

        winning_score = await self.client.get_winning_score(
            tournament_id,
            match_score,
            [scores[team_id] for team_id in match_up.team_ids]
        )

        winner = pick_winner(match_up.team_ids, scores, winning_score, match_up.match_index)
        logger.debug(
            f"Round {round_index} match {match_up.match_index}: team {winner} wins with {winning_score}"
        )
        return MatchResult(
            match_index=match_up.match_index,
            winning_team_id=winner,
            winning_score=winning_score,
        )
