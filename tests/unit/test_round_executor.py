"""
Unit tests for RoundExecutor.
"""
import asyncio
import itertools

import pytest
from bracket_engine.bracket import advance
from bracket_engine.match_resolver import MatchResolver
from bracket_engine.models import MatchUp
from bracket_engine.round_executor import RoundExecutor
from bracket_engine.team_cache import TeamScoreCache
from shared.errors import MatchFailure, NotFound, RoundFailure, TransportFailure

ROUND = [MatchUp(i, (2 * i + 1, 2 * i + 2)) for i in range(4)]


def executor_for(remote):
    return RoundExecutor(MatchResolver(remote, TeamScoreCache(remote)))


class TestRunRound:
    """Tests for run_round."""

    @pytest.mark.asyncio
    async def test_results_in_match_index_order(self, remote):
        results = await executor_for(remote).run_round('t', 0, ROUND)

        assert [r.match_index for r in results] == [0, 1, 2, 3]
        assert [r.winning_team_id for r in results] == [2, 4, 6, 8]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("finish_order", list(itertools.permutations(range(4)))[::5])
    async def test_completion_order_never_leaks(self, make_remote, finish_order):
        """However the matches finish, winners come back in bracket order."""
        delays = {('match', 0, m): 0.002 * (position + 1) for position, m in enumerate(finish_order)}
        remote = make_remote(delays=delays)

        results = await executor_for(remote).run_round('t', 0, ROUND)

        assert [r.winning_team_id for r in results] == [2, 4, 6, 8]
        assert advance(results, 2) == [MatchUp(0, (2, 4)), MatchUp(1, (6, 8))]

    @pytest.mark.asyncio
    async def test_input_order_does_not_matter(self, remote):
        shuffled = [ROUND[2], ROUND[0], ROUND[3], ROUND[1]]
        results = await executor_for(remote).run_round('t', 0, shuffled)

        assert [r.match_index for r in results] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_matches_run_concurrently(self, make_remote):
        """Four slow matches take about as long as one."""
        remote = make_remote(delays={('match', 0, m): 0.2 for m in range(4)})
        loop = asyncio.get_running_loop()

        started = loop.time()
        await executor_for(remote).run_round('t', 0, ROUND)

        assert loop.time() - started < 0.6

    @pytest.mark.asyncio
    async def test_empty_round(self, remote):
        assert await executor_for(remote).run_round('t', 0, []) == []


class TestRoundFailure:
    """One failed match fails the whole round."""

    @pytest.mark.asyncio
    async def test_team_failure_fails_round(self, make_remote):
        error = NotFound('get_team_score', 'Team not found')
        remote = make_remote(failures={('team', 5): error})

        with pytest.raises(RoundFailure) as exc_info:
            await executor_for(remote).run_round('t', 1, ROUND)

        failure = exc_info.value
        assert failure.round_index == 1
        assert isinstance(failure.cause, MatchFailure)
        assert failure.cause.match_index == 2
        assert failure.cause.cause is error

    @pytest.mark.asyncio
    async def test_first_failure_wins(self, make_remote):
        """The earliest failure is reported; later ones are discarded."""
        remote = make_remote(
            failures={
                ('match', 0, 3): TransportFailure('get_match_score', 'first', 500),
                ('match', 0, 0): TransportFailure('get_match_score', 'second', 500),
            },
            delays={('match', 0, 0): 0.05}
        )

        with pytest.raises(RoundFailure) as exc_info:
            await executor_for(remote).run_round('t', 0, ROUND)

        assert exc_info.value.cause.match_index == 3

    @pytest.mark.asyncio
    async def test_does_not_wait_for_stragglers(self, make_remote):
        """The round fails as soon as the failure is known."""
        remote = make_remote(
            failures={('team', 1): TransportFailure('get_team_score', 'down', 503)},
            delays={('match', 0, 3): 0.5}
        )
        loop = asyncio.get_running_loop()

        started = loop.time()
        with pytest.raises(RoundFailure):
            await executor_for(remote).run_round('t', 0, ROUND)

        assert loop.time() - started < 0.4
