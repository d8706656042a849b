import asyncio
import json
import logging
import uuid
from typing import List, Optional

from bracket_engine import TournamentOrchestrator
from shared.events import Event, EventType
from shared.pubsub import PubSubClient
from shared.state_machine import TournamentStateMachine
from .models import db, TournamentRun, RunEvent, utcnow

logger = logging.getLogger(__name__)


class RunRegistry:
    """
    Keeps a record of every tournament run:
    - Create run records before the remote tournament exists
    - Mirror lifecycle events onto the run as they stream in
    - Look up and list past runs
    """

    def __init__(self, pubsub: PubSubClient = None):
        self.pubsub = pubsub

    def create_run(self, teams_per_match: int, total_teams: int) -> TournamentRun:
        """Create a new run in pending state."""
        run = TournamentRun(
            run_id=f"run_{uuid.uuid4().hex[:12]}",
            teams_per_match=teams_per_match,
            total_teams=total_teams,
            status='pending'
        )

        db.session.add(run)
        db.session.commit()

        return run

    def get_run(self, run_id: str) -> Optional[TournamentRun]:
        """Get a run by its public ID."""
        return TournamentRun.query.filter_by(run_id=run_id).first()

    def list_runs(
        self,
        status: str = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[TournamentRun]:
        """List runs with optional filtering."""
        query = TournamentRun.query

        if status:
            query = query.filter_by(status=status)

        query = query.order_by(TournamentRun.created_at.desc(), TournamentRun.id.desc())
        return query.offset(offset).limit(limit).all()

    def record_event(self, run: TournamentRun, event: Event):
        """Store an event and fold it into the run's summary fields."""
        data = event.data or {}

        if event.tournament_id and not run.tournament_id:
            run.tournament_id = event.tournament_id

        if event.type == EventType.STATE_CHANGED:
            sm = TournamentStateMachine.from_state_string(run.status)
            if sm.state.value != data.get('from_state'):
                logger.warning(
                    f"Run {run.run_id} is {run.status} but event moves from {data.get('from_state')}"
                )
            run.status = data['to_state']
            if data['to_state'] == 'in_progress':
                run.start_time = utcnow()
        elif event.type == EventType.ROUND_STARTED:
            run.current_round = data['round']
        elif event.type == EventType.ROUND_COMPLETED:
            run.rounds_known = data['rounds_known']
        elif event.type == EventType.TOURNAMENT_COMPLETED:
            run.champion_id = data['champion']
            run.end_time = utcnow()
        elif event.type == EventType.TOURNAMENT_FAILED:
            run.failed_round = data['round']
            run.failure_cause = data['cause']
            run.failure_type = data.get('error_type')
            run.end_time = utcnow()

        db.session.add(RunEvent(
            run_id=run.id,
            event_type=event.type.value if isinstance(event.type, EventType) else event.type,
            timestamp=event.timestamp,
            data=json.dumps(data)
        ))
        db.session.commit()

    def execute_run(self, run: TournamentRun, client) -> Event:
        """
        Drive the tournament for a pending run and return its terminal event.

        Events are stored as the stream yields them and a failed commit
        propagates out of the run. Publishing is a listener, so Redis errors
        are only logged.
        """
        listeners = [self.pubsub.handle_event] if self.pubsub else []
        orchestrator = TournamentOrchestrator(client, listeners)
        return asyncio.run(self._record_stream(run, orchestrator))

    async def _record_stream(self, run: TournamentRun, orchestrator: TournamentOrchestrator) -> Event:
        final = None
        async for event in orchestrator.stream(run.teams_per_match, run.total_teams):
            self.record_event(run, event)
            final = event
        return final

    def get_events(self, run_id: str) -> Optional[List[RunEvent]]:
        run = self.get_run(run_id)
        if not run:
            return None
        return list(run.events)
