"""
Core dataclasses for the list tournament engine.

Defines Item, ItemList, Match, Tournament and HistoryPoint models with
validation. Models are frozen snapshots: operations return updated copies
built with dataclasses.replace and never mutate their inputs.
"""

import math
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import ValidationError

if TYPE_CHECKING:
    from .query.ast_nodes import QueryNode

AttributeValue = int | float | str | date

DEFAULT_SCORE = 1500.0


class ListMode(str, Enum):
    """How a list is ranked."""

    SORT = "sort"
    TOURNAMENT = "tournament"


class MatchState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


class TournamentState(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Item:
    """A single rankable entry of a list."""

    id: str
    name: str
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    score: float = DEFAULT_SCORE
    rank: int | None = None
    hidden: bool = False
    wins: int = 0
    losses: int = 0

    def __post_init__(self) -> None:
        """Validate item data."""
        if not self.id:
            raise ValidationError("item id cannot be empty")
        if isinstance(self.score, bool) or not isinstance(self.score, (int, float)):
            raise ValidationError(f"score must be a number for item {self.id}")
        if not math.isfinite(self.score):
            raise ValidationError(f"score must be finite for item {self.id}, got {self.score}")
        for key, value in self.attributes.items():
            if isinstance(value, (bool, datetime)) or not isinstance(value, (int, float, str, date)):
                raise ValidationError(
                    f"attribute {key!r} of item {self.id} must be a number, text or calendar date"
                )
            if isinstance(value, float) and not math.isfinite(value):
                raise ValidationError(f"attribute {key!r} of item {self.id} must be finite")
        # Read-only view so a frozen item cannot be changed through its attributes
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))


@dataclass(frozen=True)
class ItemList:
    """Ordered, versioned collection of items owned by a user."""

    id: str
    owner: str
    items: tuple[Item, ...] = ()
    query: "QueryNode | None" = None
    mode: ListMode = ListMode.SORT
    version: int = 0

    def __post_init__(self) -> None:
        """Validate list data."""
        if not self.id:
            raise ValidationError("list id cannot be empty")
        if self.version < 0:
            raise ValidationError(f"version must be non-negative, got {self.version}")
        object.__setattr__(self, "items", tuple(self.items))
        seen: set[str] = set()
        for item in self.items:
            if item.id in seen:
                raise ValidationError(f"duplicate item id {item.id!r} in list {self.id}")
            seen.add(item.id)

    def get_item(self, item_id: str) -> Item:
        for item in self.items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)


@dataclass(frozen=True)
class Match:
    """One pairing of a bracket. A bye has no item_b."""

    id: str
    list_id: str
    round: int
    item_a: str
    item_b: str | None = None
    winner: str | None = None
    state: MatchState = MatchState.PENDING

    @property
    def is_bye(self) -> bool:
        return self.item_b is None

    @property
    def loser(self) -> str | None:
        if self.winner is None or self.item_b is None:
            return None
        return self.item_b if self.winner == self.item_a else self.item_a

    def participants(self) -> tuple[str, ...]:
        if self.item_b is None:
            return (self.item_a,)
        return (self.item_a, self.item_b)


@dataclass(frozen=True)
class Standing:
    """Final placement of an item once a tournament is complete."""

    item_id: str
    rank: int
    seed: int
    eliminated_in: int | None = None


@dataclass(frozen=True)
class Tournament:
    """Single-elimination bracket stored as an indexed tuple of rounds."""

    list_id: str
    seeds: tuple[str, ...]
    rounds: tuple[tuple[Match, ...], ...] = ()
    round: int = 1
    state: TournamentState = TournamentState.IN_PROGRESS
    standings: tuple[Standing, ...] = ()

    @property
    def current_round(self) -> tuple[Match, ...]:
        if not self.rounds:
            return ()
        return self.rounds[self.round - 1]


@dataclass(frozen=True)
class HistoryPoint:
    """Score of an item at a point in time."""

    item_id: str
    score: float
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        """Validate history point."""
        if not self.item_id:
            raise ValidationError("item_id cannot be empty")
        if not math.isfinite(self.score):
            raise ValidationError(f"score must be finite for item {self.item_id}")
