"""
Bracket Engine - drives a single elimination tournament against the remote
tournament services.

Responsibilities:
- Create the tournament and receive the seeded first round
- Resolve every match of a round concurrently
- Memoize team scores for the length of a run
- Build the next round from the winners until one champion remains
- Report progress, completion and failure as events
"""
from .bracket import advance, count_rounds, group_match_ups, is_valid_bracket_size
from .match_resolver import MatchResolver, pick_winner
from .models import CreatedTournament, MatchResult, MatchUp, Round, TeamRecord, Tournament, TournamentComplete
from .orchestrator import TournamentOrchestrator, run_tournament
from .remote_client import HttpRemoteClient
from .round_executor import RoundExecutor
from .team_cache import TeamScoreCache
