"""
HTTP client for the four remote tournament operations.

Every public method is a coroutine. The blocking ``requests`` call runs in a
worker thread so the event loop keeps scheduling the other matches of the
round while a request is in flight. Any client exposing the same four
coroutines can be handed to the engine.
"""
import asyncio
import logging
from typing import Any, Dict, Sequence
from urllib.parse import urljoin

import requests

from shared.errors import NotFound, TransportFailure
from .models import CreatedTournament, MatchUp, TeamRecord

logger = logging.getLogger(__name__)

CREATE_TOURNAMENT = 'create_tournament'
GET_MATCH_SCORE = 'get_match_score'
GET_TEAM_SCORE = 'get_team_score'
GET_WINNING_SCORE = 'get_winning_score'


class HttpRemoteClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session = None):
        self.base_url = base_url.rstrip('/') + '/'
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    async def create_tournament(self, teams_per_match: int, total_teams: int) -> CreatedTournament:
        payload = await self._call(CREATE_TOURNAMENT, 'POST', 'tournament', {
            'numberOfTeams': total_teams,
            'teamsPerMatch': teams_per_match,
        })
        raw_match_ups = _field(payload, 'matchUps', CREATE_TOURNAMENT)
        if not isinstance(raw_match_ups, list):
            raise TransportFailure(CREATE_TOURNAMENT, f"Response field 'matchUps' is not a list: {raw_match_ups!r}")

        match_ups = [
            MatchUp(
                match_index=_int_field(m, 'match', CREATE_TOURNAMENT),
                team_ids=_int_list_field(m, 'teamIds', CREATE_TOURNAMENT),
            )
            for m in raw_match_ups
        ]
        return CreatedTournament(
            tournament_id=str(_field(payload, 'tournamentId', CREATE_TOURNAMENT)),
            match_ups=tuple(sorted(match_ups, key=lambda m: m.match_index)),
        )

    async def get_match_score(self, tournament_id: str, round_index: int, match_index: int) -> float:
        payload = await self._call(GET_MATCH_SCORE, 'GET', 'match', {
            'tournamentId': tournament_id,
            'round': round_index,
            'match': match_index,
        })
        return _field(payload, 'score', GET_MATCH_SCORE)

    async def get_team_score(self, tournament_id: str, team_id: int) -> TeamRecord:
        payload = await self._call(GET_TEAM_SCORE, 'GET', 'team', {
            'tournamentId': tournament_id,
            'teamId': team_id,
        })
        return TeamRecord(
            team_id=_int_field(payload, 'teamId', GET_TEAM_SCORE),
            name=payload.get('name', ''),
            score=_field(payload, 'score', GET_TEAM_SCORE),
        )

    async def get_winning_score(self, tournament_id: str, match_score, team_scores: Sequence) -> float:
        payload = await self._call(GET_WINNING_SCORE, 'GET', 'winner', {
            'tournamentId': tournament_id,
            'teamScores': ','.join(str(s) for s in team_scores),
            'matchScore': match_score,
        })
        return _field(payload, 'score', GET_WINNING_SCORE)

    async def _call(self, operation: str, method: str, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(self._request, operation, method, path, params)

    def _request(self, operation: str, method: str, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = urljoin(self.base_url, path)
        logger.debug(f"{operation}: {method} {url} {params}")

        try:
            if method == 'GET':
                response = self.session.get(url, params=params, timeout=self.timeout)
            else:
                # requests form-encodes dict bodies as application/x-www-form-urlencoded
                response = self.session.request(method, url, data=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportFailure(operation, str(e), status=0, status_text=type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportFailure(
                operation,
                f"Invalid JSON response ({response.status_code} {response.reason})",
                status=response.status_code,
                status_text=response.reason
            ) from e

        if isinstance(payload, dict) and payload.get('error'):
            raise map_error_response(operation, response.status_code, response.reason, payload)

        if response.status_code >= 400:
            raise map_error_response(operation, response.status_code, response.reason, {})

        if not isinstance(payload, dict):
            raise TransportFailure(operation, f"Expected a JSON object, got {type(payload).__name__}",
                                   status=response.status_code, status_text=response.reason)
        return payload


def map_error_response(operation: str, status: int, status_text: str, payload: Dict[str, Any]) -> Exception:
    message = payload.get('message') or payload.get('error')
    if not isinstance(message, str):
        message = f"{status} {status_text}"

    if status == 404 or 'not found' in message.lower():
        return NotFound(operation, message)
    return TransportFailure(operation, message, status=status, status_text=status_text)


def _field(payload: Dict[str, Any], key: str, operation: str):
    try:
        return payload[key]
    except (KeyError, TypeError):
        raise TransportFailure(operation, f"Response is missing '{key}'")


def _int_field(payload: Dict[str, Any], key: str, operation: str) -> int:
    value = _field(payload, key, operation)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TransportFailure(operation, f"Response field '{key}' is not an integer: {value!r}")


def _int_list_field(payload: Dict[str, Any], key: str, operation: str) -> tuple:
    values = _field(payload, key, operation)
    try:
        return tuple(int(v) for v in values)
    except (TypeError, ValueError):
        raise TransportFailure(operation, f"Response field '{key}' is not a list of integers: {values!r}")


__all__ = [
    'HttpRemoteClient',
    'map_error_response',
    'CREATE_TOURNAMENT',
    'GET_MATCH_SCORE',
    'GET_TEAM_SCORE',
    'GET_WINNING_SCORE',
]
