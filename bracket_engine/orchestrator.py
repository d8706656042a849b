import asyncio
import logging
from typing import AsyncIterator, Callable, Iterable, List, Optional

from shared.errors import Cancelled, MatchFailure, RoundFailure
from shared.events import (
    Event, state_changed_event, tournament_created_event, tournament_started_event,
    round_started_event, match_result_event, round_completed_event,
    tournament_completed_event, tournament_failed_event
)
from .bracket import advance
from .match_resolver import MatchResolver
from .models import Round, Tournament, TournamentComplete
from .round_executor import RoundExecutor
from .team_cache import TeamScoreCache

logger = logging.getLogger(__name__)

Listener = Callable[[Event], None]


def root_cause(error: BaseException) -> BaseException:
    while isinstance(error, (RoundFailure, MatchFailure)):
        error = error.cause
    return error


class TournamentOrchestrator:
    """
    Drives one tournament from creation to a champion.

    ``stream`` yields every event as it happens and always ends with exactly
    one terminal event: tournament.completed or tournament.failed. Listeners
    receive the same events synchronously, before they are yielded.
    """

    def __init__(self, client, listeners: Iterable[Listener] = None):
        self.client = client
        self.listeners: List[Listener] = list(listeners or [])
        self.tournament: Optional[Tournament] = None
        self.cache: Optional[TeamScoreCache] = None

    def add_listener(self, listener: Listener):
        self.listeners.append(listener)

    async def start(self, teams_per_match: int, total_teams: int) -> Event:
        """Run the tournament to the end and return the terminal event."""
        final = None
        async for event in self.stream(teams_per_match, total_teams):
            final = event
        return final

    async def stream(self, teams_per_match: int, total_teams: int) -> AsyncIterator[Event]:
        tournament = Tournament(
            tournament_id=None,
            teams_per_match=teams_per_match,
            total_teams=total_teams
        )
        self.tournament = tournament
        self.cache = TeamScoreCache(self.client)
        executor = RoundExecutor(MatchResolver(self.client, self.cache))

        try:
            created = await self.client.create_tournament(teams_per_match, total_teams)
        except asyncio.CancelledError:
            self._fail(tournament, Cancelled(0))
            raise
        except Exception as e:
            for event in self._fail(tournament, e):
                yield event
            return

        tournament.tournament_id = created.tournament_id
        yield self._emit(tournament_created_event(created.tournament_id, teams_per_match, total_teams))
        yield self._transition(tournament, 'start')
        yield self._emit(tournament_started_event(created.tournament_id, len(created.match_ups)))

        match_ups = list(created.match_ups)
        while True:
            round_index = tournament.current_round
            yield self._emit(round_started_event(tournament.tournament_id, round_index, len(match_ups)))

            try:
                results = await executor.run_round(tournament.tournament_id, round_index, match_ups)
                outcome = advance(results, teams_per_match)
            except asyncio.CancelledError:
                self._fail(tournament, Cancelled(round_index))
                raise
            except Exception as e:
                for event in self._fail(tournament, e):
                    yield event
                return

            tournament.rounds.append(Round(round_index, match_ups, results))
            for result in results:
                yield self._emit(match_result_event(
                    tournament.tournament_id, round_index, result.match_index,
                    result.winning_team_id, result.winning_score
                ))

            finished = isinstance(outcome, TournamentComplete)
            rounds_known = len(tournament.rounds) + (0 if finished else 1)
            yield self._emit(round_completed_event(
                tournament.tournament_id, round_index, rounds_known, tournament.rounds[-1].winners
            ))

            if finished:
                tournament.champion_id = outcome.champion_id
                yield self._transition(tournament, 'complete', {'winners': [outcome.champion_id]})
                logger.info(
                    f"Tournament {tournament.tournament_id} won by team {outcome.champion_id} "
                    f"after {len(tournament.rounds)} rounds"
                )
                yield self._emit(tournament_completed_event(
                    tournament.tournament_id, outcome.champion_id, len(tournament.rounds)
                ))
                return

            tournament.state_machine.transition('advance')
            tournament.current_round += 1
            match_ups = outcome

    def _transition(self, tournament: Tournament, action: str, guard_context: dict = None) -> Event:
        old_state = tournament.status.value
        new_state = tournament.state_machine.transition(action, guard_context)
        logger.info(f"Tournament {tournament.tournament_id}: {old_state} -> {new_state.value}")
        return self._emit(state_changed_event(tournament.tournament_id, old_state, new_state.value))

    def _fail(self, tournament: Tournament, error: BaseException) -> List[Event]:
        round_index = getattr(error, 'round_index', tournament.current_round)
        cause = root_cause(error)
        logger.warning(f"Tournament {tournament.tournament_id} failed in round {round_index}: {error}")

        events = [self._transition(tournament, 'fail')]
        events.append(self._emit(tournament_failed_event(
            tournament.tournament_id, round_index, str(error), type(cause).__name__
        )))
        return events

    def _emit(self, event: Event) -> Event:
        for listener in self.listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed on {event.type}")
        return event


def run_tournament(client, teams_per_match: int, total_teams: int,
                   listeners: Iterable[Listener] = None) -> Event:
    """Blocking entry point: run a whole tournament on a fresh event loop."""
    orchestrator = TournamentOrchestrator(client, listeners)
    return asyncio.run(orchestrator.start(teams_per_match, total_teams))
