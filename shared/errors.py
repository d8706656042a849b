from typing import Optional


class TournamentError(Exception):
    """Base class for every failure raised while driving a tournament."""


class RemoteServiceError(TournamentError):
    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}")


class TransportFailure(RemoteServiceError):
    def __init__(self, operation: str, message: str, status: int = None, status_text: str = None):
        self.status = status
        self.status_text = status_text
        super().__init__(operation, message)


class NotFound(RemoteServiceError):
    pass


class Inconsistency(TournamentError):
    def __init__(self, match_index: int, winning_score, scores: dict):
        self.match_index = match_index
        self.winning_score = winning_score
        self.scores = scores
        super().__init__(
            f"Winning score {winning_score} of match {match_index} "
            f"matches none of the team scores {scores}"
        )


class BracketInconsistency(TournamentError):
    def __init__(self, winner_count: int, teams_per_match: int):
        self.winner_count = winner_count
        self.teams_per_match = teams_per_match
        super().__init__(
            f"Cannot group {winner_count} winners into matches of {teams_per_match} teams"
        )


class Cancelled(TournamentError):
    def __init__(self, round_index: int, match_index: Optional[int] = None):
        self.round_index = round_index
        self.match_index = match_index
        if match_index is None:
            reason = f"Round {round_index} was cancelled"
        else:
            reason = f"Match {match_index} of round {round_index} was abandoned after a sibling failure"
        super().__init__(reason)


class MatchFailure(TournamentError):
    def __init__(self, match_index: int, cause: Exception):
        self.match_index = match_index
        self.cause = cause
        super().__init__(f"Match {match_index} failed: {cause}")


class RoundFailure(TournamentError):
    def __init__(self, round_index: int, cause: Exception):
        self.round_index = round_index
        self.cause = cause
        super().__init__(f"Round {round_index} failed: {cause}")
