"""
List engine.

Coordinates the query evaluator, tournament scheduler and rating engine
over list snapshots. Callers orchestrate load -> engine call -> save:

    item_list = store.get_list(list_id)
    result = engine.submit_result(item_list, tournament, "r1-m0", "a", item_list.version)
    store.save_list(result.item_list, item_list.version)
    history.extend(result.history_points)

Every mutation takes the version the caller read and fails with
VersionConflict when the snapshot it is given is not that version.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace

from .config import EngineConfig
from .exceptions import ValidationError, VersionConflict
from .interfaces import DataSourceAdapter, RatingEngine
from .logging_config import get_logger
from .models import HistoryPoint, Item, ItemList, ListMode, Tournament, TournamentState
from .query.ast_nodes import QueryNode, format_query
from .query.evaluator import evaluate
from .query.parser import parse
from .query.schema import Schema
from .ratings.elo import EloRatingEngine
from .tournament.scheduler import TournamentScheduler, apply_standings

logger = get_logger("engine")


@dataclass(frozen=True)
class EngineResult:
    """Next list snapshot plus derived events."""

    item_list: ItemList
    tournament: Tournament | None = None
    history_points: tuple[HistoryPoint, ...] = ()
    changed: bool = True


class ListEngine:
    """Stateless facade over the ranking components."""

    def __init__(self, config: EngineConfig | None = None, rating_engine: RatingEngine | None = None):
        """
        Initialize engine.

        Args:
            config: Engine configuration (defaults when omitted)
            rating_engine: Rating engine override (Elo from config by default)
        """
        self.config = config or EngineConfig()
        self.rating_engine = rating_engine or EloRatingEngine.from_config(self.config)
        self.scheduler = TournamentScheduler(self.rating_engine)

    @staticmethod
    def _check_version(item_list: ItemList, expected_version: int) -> None:
        if item_list.version != expected_version:
            logger.warning(
                f"Version conflict on list {item_list.id}: expected {expected_version}, got {item_list.version}"
            )
            raise VersionConflict(item_list.id, expected_version, item_list.version)

    def parse_query(self, item_list: ItemList, text: str) -> QueryNode | None:
        """Parse query text against the fields of a list's items."""
        return parse(text, Schema.from_items(item_list.items))

    def evaluate(self, item_list: ItemList, query_text: str | None = None) -> list[Item]:
        """
        Filter and order a list's items.

        Args:
            item_list: List snapshot
            query_text: Query to apply; the list's stored query when None
        """
        node = item_list.query if query_text is None else self.parse_query(item_list, query_text)
        return evaluate(node, item_list.items)

    def set_query(self, item_list: ItemList, query_text: str, expected_version: int) -> ItemList:
        """Return a snapshot with a new stored query (cleared by empty text)."""
        self._check_version(item_list, expected_version)
        node = self.parse_query(item_list, query_text)
        logger.info(f"Set query of list {item_list.id} to {format_query(node)!r}")
        return replace(item_list, query=node)

    def ranked(self, item_list: ItemList) -> list[Item]:
        """Visible items by descending score, ties broken by id."""
        visible = [item for item in item_list.items if not item.hidden]
        return sorted(visible, key=lambda item: (-item.score, item.id))

    def start_tournament(self, item_list: ItemList, expected_version: int) -> EngineResult:
        """
        Seed a tournament from the list's query-filtered items.

        Raises:
            BracketSizeError: the query selects no items
        """
        self._check_version(item_list, expected_version)
        seeded = self.evaluate(item_list)
        tournament = self.scheduler.start(item_list.id, seeded)

        items = item_list.items
        if tournament.state == TournamentState.COMPLETE:
            items = apply_standings(items, tournament)
        updated = replace(item_list, items=items, mode=ListMode.TOURNAMENT)
        return EngineResult(item_list=updated, tournament=tournament)

    def submit_result(
        self,
        item_list: ItemList,
        tournament: Tournament,
        match_id: str,
        winner_id: str,
        expected_version: int,
        timestamp: float | None = None,
    ) -> EngineResult:
        """Resolve a match, re-rate the pair and advance the bracket."""
        self._check_version(item_list, expected_version)
        if tournament.list_id != item_list.id:
            raise ValidationError(
                f"Tournament belongs to list {tournament.list_id}, not {item_list.id}"
            )

        result = self.scheduler.submit_result(
            tournament, item_list.items, match_id, winner_id, timestamp=timestamp
        )
        if not result.changed:
            return EngineResult(item_list=item_list, tournament=tournament, changed=False)

        return EngineResult(
            item_list=replace(item_list, items=result.items),
            tournament=result.tournament,
            history_points=result.history_points,
        )

    def merge_import(self, item_list: ItemList, incoming: Sequence[Item], expected_version: int) -> ItemList:
        """
        Merge items supplied by a data source.

        Existing items keep their ranking state (score, rank, hidden,
        wins, losses) and take the incoming name and attributes. New items
        are appended in incoming order with the configured default score.
        """
        self._check_version(item_list, expected_version)
        incoming_by_id: dict[str, Item] = {}
        for item in incoming:
            if item.id in incoming_by_id:
                raise ValidationError(f"Data source supplied duplicate item id {item.id!r}")
            incoming_by_id[item.id] = item

        merged: list[Item] = []
        for existing in item_list.items:
            update = incoming_by_id.pop(existing.id, None)
            if update is None:
                merged.append(existing)
            else:
                merged.append(replace(existing, name=update.name, attributes=update.attributes))

        for item in incoming_by_id.values():
            merged.append(Item(id=item.id, name=item.name, attributes=item.attributes, score=self.config.default_score))

        logger.info(
            f"Merged {len(incoming)} items into list {item_list.id}: {len(incoming_by_id)} new"
        )
        return replace(item_list, items=tuple(merged))

    def import_from(self, item_list: ItemList, source: DataSourceAdapter, expected_version: int) -> ItemList:
        """Merge the items of a data source adapter."""
        return self.merge_import(item_list, source.fetch_items(), expected_version)
