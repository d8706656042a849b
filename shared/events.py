from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
import json


class EventType(str, Enum):
    # Tournament lifecycle
    TOURNAMENT_CREATED = "tournament.created"
    TOURNAMENT_STARTED = "tournament.started"
    TOURNAMENT_COMPLETED = "tournament.completed"
    TOURNAMENT_FAILED = "tournament.failed"

    # State changes
    STATE_CHANGED = "state.changed"

    # Match events
    MATCH_RESULT = "match.result"

    # Round events
    ROUND_STARTED = "round.started"
    ROUND_COMPLETED = "round.completed"


TERMINAL_EVENTS = (EventType.TOURNAMENT_COMPLETED, EventType.TOURNAMENT_FAILED)


@dataclass
class Event:
    type: EventType
    tournament_id: Optional[str]
    timestamp: str = None
    data: dict = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"
        if self.data is None:
            self.data = {}

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_dict(self) -> dict:
        return {
            "type": self.type.value if isinstance(self.type, EventType) else self.type,
            "tournament_id": self.tournament_id,
            "timestamp": self.timestamp,
            "data": self.data
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        return cls(
            type=EventType(data["type"]) if data["type"] in [e.value for e in EventType] else data["type"],
            tournament_id=data.get("tournament_id"),
            timestamp=data.get("timestamp"),
            data=data.get("data", {})
        )

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        return cls.from_dict(json.loads(json_str))


def state_changed_event(tournament_id: str, from_state: str, to_state: str) -> Event:
    return Event(
        type=EventType.STATE_CHANGED,
        tournament_id=tournament_id,
        data={
            "from_state": from_state,
            "to_state": to_state
        }
    )


def tournament_created_event(tournament_id: str, teams_per_match: int, total_teams: int) -> Event:
    return Event(
        type=EventType.TOURNAMENT_CREATED,
        tournament_id=tournament_id,
        data={
            "teams_per_match": teams_per_match,
            "total_teams": total_teams
        }
    )


def tournament_started_event(tournament_id: str, matches_count: int) -> Event:
    return Event(
        type=EventType.TOURNAMENT_STARTED,
        tournament_id=tournament_id,
        data={
            "matches_count": matches_count
        }
    )


def match_result_event(tournament_id: str, round_num: int, match_index: int,
                       winner: int, winning_score) -> Event:
    return Event(
        type=EventType.MATCH_RESULT,
        tournament_id=tournament_id,
        data={
            "round": round_num,
            "match_index": match_index,
            "winner": winner,
            "winning_score": winning_score
        }
    )


def round_started_event(tournament_id: str, round_num: int, matches_count: int) -> Event:
    return Event(
        type=EventType.ROUND_STARTED,
        tournament_id=tournament_id,
        data={
            "round": round_num,
            "matches_count": matches_count
        }
    )


def round_completed_event(tournament_id: str, round_num: int, rounds_known: int, winners: list) -> Event:
    return Event(
        type=EventType.ROUND_COMPLETED,
        tournament_id=tournament_id,
        data={
            "round": round_num,
            "rounds_known": rounds_known,
            "winners": list(winners)
        }
    )


def tournament_completed_event(tournament_id: str, champion: int, rounds_played: int) -> Event:
    return Event(
        type=EventType.TOURNAMENT_COMPLETED,
        tournament_id=tournament_id,
        data={
            "champion": champion,
            "rounds_played": rounds_played
        }
    )


def tournament_failed_event(tournament_id: Optional[str], round_num: int, cause: str,
                            error_type: str = None) -> Event:
    return Event(
        type=EventType.TOURNAMENT_FAILED,
        tournament_id=tournament_id,
        data={
            "round": round_num,
            "cause": cause,
            "error_type": error_type
        }
    )
