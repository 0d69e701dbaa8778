"""
List Tournament - List Ranking & Tournament Engine

Curate lists of items, filter and sort them with a small query language,
rank them through single-elimination brackets with Elo rating updates and
chart time-weighted score history.
"""

from .config import EngineConfig
from .engine import EngineResult, ListEngine
from .exceptions import (
    AlreadyResolved,
    BracketSizeError,
    ConfigurationError,
    InvalidWinner,
    ListNotFound,
    ListTournamentError,
    ParseError,
    QueryError,
    TypeMismatch,
    UnknownField,
    UnknownMatch,
    ValidationError,
    VersionConflict,
)
from .history import HistoryAggregator
from .interfaces import DataSourceAdapter, ListStore, RatingEngine
from .models import HistoryPoint, Item, ItemList, ListMode, Match, MatchState, Standing, Tournament, TournamentState
from .ratings import EloRatingEngine
from .tournament import MatchResult, TournamentScheduler

__version__ = "0.1.0"
__all__ = [
    "AlreadyResolved",
    "BracketSizeError",
    "ConfigurationError",
    "DataSourceAdapter",
    "EloRatingEngine",
    "EngineConfig",
    "EngineResult",
    "HistoryAggregator",
    "HistoryPoint",
    "InvalidWinner",
    "Item",
    "ItemList",
    "ListEngine",
    "ListMode",
    "ListNotFound",
    "ListStore",
    "ListTournamentError",
    "Match",
    "MatchResult",
    "MatchState",
    "ParseError",
    "QueryError",
    "RatingEngine",
    "Standing",
    "Tournament",
    "TournamentScheduler",
    "TournamentState",
    "TypeMismatch",
    "UnknownField",
    "UnknownMatch",
    "ValidationError",
    "VersionConflict",
]
