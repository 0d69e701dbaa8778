"""
Tests for state validation and conversion.
"""

from datetime import date

import pytest

from list_tournament.exceptions import UnknownField, ValidationError
from list_tournament.models import DEFAULT_SCORE, HistoryPoint, Item, ListMode
from list_tournament.serialization import (
    history_point_from_state,
    history_point_to_state,
    item_to_state,
    list_from_state,
    list_to_state,
)


class TestListState:
    """Test list_from_state / list_to_state."""

    def test_minimal_state_takes_defaults(self) -> None:
        """Only id, owner and item id/name are required."""
        item_list = list_from_state({
            "id": "l",
            "owner": "o",
            "items": [{"id": "a", "name": "A"}],
        })

        item = item_list.get_item("a")
        assert item.score == DEFAULT_SCORE
        assert item.rank is None
        assert not item.hidden
        assert item_list.mode == ListMode.SORT
        assert item_list.version == 0
        assert item_list.query is None

    def test_dates_and_query_restored(self) -> None:
        state = {
            "id": "l",
            "owner": "o",
            "items": [{"id": "a", "name": "A", "attributes": {"seen": {"$date": "2024-02-29"}, "n": 3}}],
            "query": "seen >= '2024-01-01' and n = 3",
            "mode": "tournament",
            "version": 4,
        }

        item_list = list_from_state(state)

        assert item_list.get_item("a").attributes["seen"] == date(2024, 2, 29)
        assert item_list.mode == ListMode.TOURNAMENT
        assert list_to_state(item_list) == {
            **state,
            "items": [{
                "id": "a",
                "name": "A",
                "attributes": {"seen": {"$date": "2024-02-29"}, "n": 3},
                "score": DEFAULT_SCORE,
                "rank": None,
                "hidden": False,
                "wins": 0,
                "losses": 0,
            }],
        }

    @pytest.mark.parametrize(
        "state",
        [
            {"id": "l", "items": []},
            {"id": "l", "owner": "o", "items": [{"id": "a"}]},
            {"id": "l", "owner": "o", "items": [], "mode": "bracket"},
            {"id": "l", "owner": "o", "items": [{"id": "a", "name": "A", "attributes": {"d": {"$date": "soon"}}}]},
            {"id": "l", "owner": "o", "items": [{"id": "a", "name": "A", "attributes": {"d": {"when": "x"}}}]},
            {"id": "l", "owner": "o", "items": [{"id": "a", "name": "A"}, {"id": "a", "name": "B"}]},
            "not a list",
        ],
    )
    def test_invalid_state_rejected(self, state) -> None:
        with pytest.raises(ValidationError):
            list_from_state(state)

    def test_stored_query_must_fit_items(self) -> None:
        """A query naming a field no item carries fails on load."""
        with pytest.raises(UnknownField):
            list_from_state({
                "id": "l",
                "owner": "o",
                "items": [{"id": "a", "name": "A"}],
                "query": "genre = 'rock'",
            })


class TestHistoryPointState:
    """Test history point conversion."""

    def test_round_trip(self) -> None:
        point = HistoryPoint("a", 1516.0, 1700000000.5)

        assert history_point_from_state(history_point_to_state(point)) == point

    def test_missing_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            history_point_from_state({"item_id": "a", "score": 1.0})

    def test_item_state_encodes_dates(self) -> None:
        state = item_to_state(Item(id="a", name="A", attributes={"d": date(2020, 1, 2)}))

        assert state["attributes"] == {"d": {"$date": "2020-01-02"}}
