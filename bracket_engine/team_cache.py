import asyncio
import logging
from typing import Dict

from .models import TeamRecord

logger = logging.getLogger(__name__)


class TeamScoreCache:
    """
    Per-run memo of team score lookups.

    A team id is fetched at most once: concurrent lookups of an id that is
    still in flight await the same request. Failed fetches are not stored,
    so a later lookup issues a fresh request.
    """

    def __init__(self, client):
        self.client = client
        self._records: Dict[int, TeamRecord] = {}
        self._in_flight: Dict[int, asyncio.Task] = {}
        self.fetch_count = 0

    def __contains__(self, team_id: int) -> bool:
        return team_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    async def lookup(self, tournament_id: str, team_id: int) -> TeamRecord:
        record = self._records.get(team_id)
        if record is not None:
            return record

        task = self._in_flight.get(team_id)
        if task is None:
            task = asyncio.ensure_future(self._fetch(tournament_id, team_id))
            self._in_flight[team_id] = task
        else:
            logger.debug(f"Joining in-flight fetch for team {team_id}")

        # One waiter being cancelled must not cancel the fetch the others share
        return await asyncio.shield(task)

    async def _fetch(self, tournament_id: str, team_id: int) -> TeamRecord:
        self.fetch_count += 1
        try:
            record = await self.client.get_team_score(tournament_id, team_id)
        finally:
            self._in_flight.pop(team_id, None)
        self._records[team_id] = record
        return record
