"""
Abstract base classes defining the interfaces for the list tournament engine.

All interfaces are synchronous. The engine itself never performs I/O; stores
and data sources are collaborators supplied by the caller.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from typing_extensions import NotRequired, TypedDict

from .models import Item, ItemList


class ItemState(TypedDict):
    """TypedDict for a serialized item. Optional keys take model defaults."""
    id: str
    name: str
    attributes: NotRequired[dict[str, int | float | str | dict[str, str]]]  # dates as {"$date": "YYYY-MM-DD"}
    score: NotRequired[float]
    rank: NotRequired[int | None]
    hidden: NotRequired[bool]
    wins: NotRequired[int]
    losses: NotRequired[int]


class ListState(TypedDict):
    """TypedDict for a serialized list snapshot."""
    id: str
    owner: str
    items: list[ItemState]
    query: NotRequired[str]  # canonical query text, empty when unset
    mode: NotRequired[str]
    version: NotRequired[int]


class HistoryPointState(TypedDict):
    """TypedDict for a serialized history point."""
    item_id: str
    timestamp: float
    score: float


class HistoryState(TypedDict):
    """TypedDict for history aggregator snapshot state."""
    points: list[HistoryPointState]


class ListStore(ABC):
    """Interface for loading and saving lists with optimistic concurrency."""

    @abstractmethod
    def get_list(self, list_id: str) -> ItemList:
        """Return the current snapshot of a list, raising ListNotFound if absent."""
        pass

    @abstractmethod
    def save_list(self, item_list: ItemList, expected_version: int) -> int:
        """
        Save a list snapshot if the stored version matches.

        Args:
            item_list: Snapshot to persist
            expected_version: Version the caller read (0 for a list never saved)

        Returns:
            The new stored version

        Raises:
            VersionConflict: the stored version differs; nothing is written
        """
        pass


class RatingEngine(ABC):
    """Interface for pairwise rating updates."""

    @abstractmethod
    def rate(self, rating_a: float, rating_b: float, outcome: float) -> tuple[float, float]:
        """
        Return updated ratings for a resolved match.

        Args:
            rating_a: Prior rating of item A
            rating_b: Prior rating of item B
            outcome: Actual score for A (1 = A won, 0 = B won)
        """
        pass


class DataSourceAdapter(ABC):
    """Interface for external catalogs that supply items for merge-import."""

    @abstractmethod
    def fetch_items(self) -> Sequence[Item]:
        """Return items deduplicated by the source's external id."""
        pass
