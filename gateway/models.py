from datetime import datetime, timezone
import json

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TournamentRun(db.Model):
    __tablename__ = 'tournament_runs'

    id = db.Column(db.Integer, primary_key=True)
    run_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    tournament_id = db.Column(db.String(100), nullable=True, index=True)  # Assigned by the remote service
    teams_per_match = db.Column(db.Integer, nullable=False)
    total_teams = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    current_round = db.Column(db.Integer, default=0)
    rounds_known = db.Column(db.Integer, default=0)

    # Results
    champion_id = db.Column(db.Integer, nullable=True)
    failed_round = db.Column(db.Integer, nullable=True)
    failure_cause = db.Column(db.Text, nullable=True)
    failure_type = db.Column(db.String(50), nullable=True)

    # Timestamps
    start_time = db.Column(db.DateTime, nullable=True)
    end_time = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    events = db.relationship('RunEvent', back_populates='run', cascade='all, delete-orphan',
                             order_by='RunEvent.id')

    def to_dict(self):
        return {
            'run_id': self.run_id,
            'tournament_id': self.tournament_id,
            'teams_per_match': self.teams_per_match,
            'total_teams': self.total_teams,
            'status': self.status,
            'current_round': self.current_round,
            'rounds_known': self.rounds_known,
            'champion_id': self.champion_id,
            'failed_round': self.failed_round,
            'failure_cause': self.failure_cause,
            'failure_type': self.failure_type,
            'event_count': len(self.events),
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class RunEvent(db.Model):
    __tablename__ = 'run_events'

    id = db.Column(db.Integer, primary_key=True)
    run_id = db.Column(db.Integer, db.ForeignKey('tournament_runs.id'), nullable=False)
    event_type = db.Column(db.String(50), nullable=False)
    timestamp = db.Column(db.String(40), nullable=False)
    data = db.Column(db.Text, nullable=False, default='{}')

    run = db.relationship('TournamentRun', back_populates='events')

    def to_dict(self):
        return {
            'type': self.event_type,
            'tournament_id': self.run.tournament_id,
            'timestamp': self.timestamp,
            'data': json.loads(self.data),
        }
