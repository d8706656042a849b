import asyncio
import logging
from typing import Dict, List, Sequence

from shared.errors import Cancelled, MatchFailure, RoundFailure
from .match_resolver import MatchResolver
from .models import MatchResult, MatchUp

logger = logging.getLogger(__name__)


class RoundExecutor:
    """
    Resolves every match of a round concurrently.

    Results come back in match_index order no matter which request finished
    first. The first failure fails the whole round; matches still running at
    that point are left to finish in the background and their outcome is
    dropped.
    """

    def __init__(self, resolver: MatchResolver):
        self.resolver = resolver

    async def run_round(self, tournament_id: str, round_index: int,
                        match_ups: Sequence[MatchUp]) -> List[MatchResult]:
        ordered = sorted(match_ups, key=lambda m: m.match_index)
        tasks: Dict[asyncio.Task, MatchUp] = {
            asyncio.ensure_future(self.resolver.resolve(tournament_id, round_index, m)): m
            for m in ordered
        }
        results: Dict[int, MatchResult] = {}
        pending = set(tasks)

        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)

                failures = []
                for task in done:
                    error = task.exception()
                    if error is None:
                        result = task.result()
                        results[result.match_index] = result
                    else:
                        failures.append(_as_match_failure(error, tasks[task]))

                if failures:
                    self._abandon(pending, tasks, round_index)
                    first = min(failures, key=lambda f: f.match_index)
                    logger.warning(f"Round {round_index} failed: {first}")
                    raise RoundFailure(round_index, first)
        except asyncio.CancelledError:
            for task in pending:
                task.cancel()
            raise

        return [results[m.match_index] for m in ordered]

    def _abandon(self, pending, tasks: Dict[asyncio.Task, MatchUp], round_index: int):
        for task in pending:
            match_up = tasks[task]
            task.add_done_callback(
                lambda t, m=match_up: _discard(t, round_index, m.match_index)
            )


def _as_match_failure(error: BaseException, match_up: MatchUp) -> MatchFailure:
    if isinstance(error, MatchFailure):
        return error
    return MatchFailure(match_up.match_index, error)


def _discard(task: asyncio.Task, round_index: int, match_index: int):
    reason = Cancelled(round_index, match_index)
    if task.cancelled():
        logger.debug(f"{reason} (cancelled)")
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"{reason}: {error}")
    else:
        logger.debug(f"{reason}: result {task.result()} discarded")
