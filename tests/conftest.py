"""
Pytest configuration and fixtures for bracket runner tests.
"""
import asyncio
import os
import sys
from collections import Counter

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['FLASK_ENV'] = 'testing'

from bracket_engine.models import CreatedTournament, MatchUp, TeamRecord
from gateway.app import create_app
from gateway.models import db


class FakeRemoteClient:
    """
    Deterministic in-memory stand-in for the remote tournament services.

    Team ids run from 1 to total_teams and, unless overridden, a team's score
    is its own id, so the highest id in each match wins. Failures and
    per-call delays are scripted by key:
        ('create',)
        ('match', round_index, match_index)
        ('team', team_id)
        ('winner', round_index, match_index)
    """

    def __init__(self, scores=None, failures=None, delays=None, winning_scores=None,
                 seed=None, tournament_id='fake-tournament'):
        self.tournament_id = tournament_id
        self.scores = dict(scores or {})
        self.failures = dict(failures or {})
        self.delays = dict(delays or {})
        self.winning_scores = dict(winning_scores or {})
        self.seed = seed
        self.calls = Counter()
        self.team_calls = Counter()
        self.winner_requests = []
        self.closed = False
        self._match_of_score = {}

    def close(self):
        self.closed = True

    async def _step(self, key):
        self.calls[key[0]] += 1
        delay = self.delays.get(key)
        if delay:
            await asyncio.sleep(delay)
        else:
            await asyncio.sleep(0)
        if key in self.failures:
            raise self.failures[key]

    async def create_tournament(self, teams_per_match, total_teams):
        await self._step(('create',))
        team_ids = self.seed or list(range(1, total_teams + 1))
        match_ups = tuple(
            MatchUp(match_index=g, team_ids=tuple(team_ids[i:i + teams_per_match]))
            for g, i in enumerate(range(0, len(team_ids), teams_per_match))
        )
        return CreatedTournament(tournament_id=self.tournament_id, match_ups=match_ups)

    async def get_match_score(self, tournament_id, round_index, match_index):
        await self._step(('match', round_index, match_index))
        match_score = round_index * 1000 + match_index
        self._match_of_score[match_score] = (round_index, match_index)
        return match_score

    async def get_team_score(self, tournament_id, team_id):
        self.team_calls[team_id] += 1
        await self._step(('team', team_id))
        return TeamRecord(team_id=team_id, name=f"Team {team_id}", score=self.scores.get(team_id, team_id))

    async def get_winning_score(self, tournament_id, match_score, team_scores):
        key = ('winner',) + self._match_of_score[match_score]
        self.winner_requests.append((match_score, list(team_scores)))
        await self._step(key)
        if key in self.winning_scores:
            return self.winning_scores[key]
        return max(team_scores)


@pytest.fixture
def remote():
    """Scripted remote client with default scores."""
    return FakeRemoteClient()


@pytest.fixture
def make_remote():
    """Factory for scripted remote clients."""
    return FakeRemoteClient


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create database session for testing."""
    with app.app_context():
        # Clear all tables before each test
        db.session.remove()

        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture
def use_remote(app, make_remote):
    """Point the app's client factory at a scripted remote and return it."""
    original = app.client_factory

    def install(**kwargs):
        fake = make_remote(**kwargs)
        app.client_factory = lambda: fake
        return fake

    yield install
    app.client_factory = original


@pytest.fixture
def mock_pubsub(mocker):
    """PubSubClient backed by a mocked Redis connection."""
    from shared.pubsub import PubSubClient
    return PubSubClient(redis_client=mocker.MagicMock())
