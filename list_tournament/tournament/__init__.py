"""
Single-elimination tournament scheduling.
"""

from .bracket import bracket_size, round_count
from .scheduler import MatchResult, TournamentScheduler, apply_standings, champion, find_match, pending_matches

__all__ = [
    "MatchResult",
    "TournamentScheduler",
    "apply_standings",
    "bracket_size",
    "champion",
    "find_match",
    "pending_matches",
    "round_count",
]
