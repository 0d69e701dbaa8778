"""
Tests for the list stores.

Both stores share the optimistic-concurrency contract; the JSON store
also persists revisions and history points.
"""

import json
import tempfile
from datetime import date
from pathlib import Path

import pytest

from list_tournament.exceptions import ListNotFound, ValidationError, VersionConflict
from list_tournament.models import HistoryPoint, Item, ItemList, ListMode
from list_tournament.query import parse, Schema
from list_tournament.storage import InMemoryListStore, JSONListStore


def make_list(list_id: str = "films") -> ItemList:
    items = (
        Item(id="a", name="Alien", score=1516.0, wins=1,
             attributes={"year": 1979, "released": date(1979, 5, 25), "genre": "horror"}),
        Item(id="b", name="Blade Runner", score=1484.0, losses=1, rank=2,
             attributes={"year": 1982, "genre": "scifi"}),
        Item(id="c", name="Cube", hidden=True, attributes={"year": 1997}),
    )
    query = parse("year > 1980 order by score desc", Schema.from_items(items))
    return ItemList(id=list_id, owner="alice", items=items, query=query, mode=ListMode.TOURNAMENT)


@pytest.fixture(params=["memory", "json"])
def store(request):
    if request.param == "memory":
        yield InMemoryListStore()
    else:
        with tempfile.TemporaryDirectory() as temp_dir:
            yield JSONListStore(Path(temp_dir))


class TestListStoreContract:
    """Behavior every ListStore must share."""

    def test_first_save_expects_version_zero(self, store) -> None:
        """A new list is saved against version 0 and stored as version 1."""
        # Act
        version = store.save_list(make_list(), expected_version=0)

        # Assert
        assert version == 1
        assert store.get_list("films").version == 1

    def test_round_trip_preserves_list(self, store) -> None:
        """Items, attributes, query and mode survive a save and load."""
        original = make_list()

        store.save_list(original, 0)
        loaded = store.get_list("films")

        assert loaded.items == original.items
        assert loaded.query == original.query
        assert loaded.mode == ListMode.TOURNAMENT
        assert loaded.owner == "alice"
        assert loaded.get_item("a").attributes["released"] == date(1979, 5, 25)

    def test_stale_write_is_rejected_and_store_unchanged(self, store) -> None:
        """Two writers read version 1; only the first write lands."""
        # Arrange
        store.save_list(make_list(), 0)
        first_read = store.get_list("films")
        second_read = store.get_list("films")

        # Act
        store.save_list(
            ItemList(id="films", owner="alice", items=first_read.items[:1], version=first_read.version),
            first_read.version,
        )
        with pytest.raises(VersionConflict) as exc_info:
            store.save_list(second_read, second_read.version)

        # Assert
        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 2
        stored = store.get_list("films")
        assert stored.version == 2
        assert [i.id for i in stored.items] == ["a"]

    def test_missing_list(self, store) -> None:
        with pytest.raises(ListNotFound):
            store.get_list("nope")

    def test_saving_new_list_with_nonzero_version_conflicts(self, store) -> None:
        with pytest.raises(VersionConflict):
            store.save_list(make_list(), expected_version=3)

    def test_list_ids(self, store) -> None:
        store.save_list(make_list("b-list"), 0)
        store.save_list(make_list("a-list"), 0)

        assert store.list_ids() == ["a-list", "b-list"]


class TestJSONListStore:
    """Test JSONListStore file behavior."""

    def test_snapshot_and_revisions_written(self) -> None:
        """Every save rewrites the snapshot and appends a revision."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            store = JSONListStore(Path(temp_dir))

            # Act
            v1 = store.save_list(make_list(), 0)
            store.save_list(store.get_list("films"), v1)

            # Assert
            snapshot = Path(temp_dir) / "lists" / "films.json"
            assert snapshot.exists()
            with open(snapshot, "r", encoding="utf-8") as f:
                data = json.load(f)
            assert data["version"] == 2
            assert data["query"] == "year > 1980 order by score desc"
            assert data["items"][0]["attributes"]["released"] == {"$date": "1979-05-25"}
            assert store.revision_count("films") == 2

    def test_survives_reopen(self) -> None:
        """A new store instance on the same directory sees saved lists."""
        with tempfile.TemporaryDirectory() as temp_dir:
            JSONListStore(Path(temp_dir)).save_list(make_list(), 0)

            reopened = JSONListStore(Path(temp_dir))

            assert reopened.get_list("films").version == 1

    def test_rejected_write_leaves_files_untouched(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JSONListStore(Path(temp_dir))
            store.save_list(make_list(), 0)

            with pytest.raises(VersionConflict):
                store.save_list(make_list(), 0)

            assert store.revision_count("films") == 1

    def test_unsafe_list_id_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JSONListStore(Path(temp_dir))

            with pytest.raises(ValidationError):
                store.save_list(make_list("../escape"), 0)

    def test_history_persist_and_load(self) -> None:
        """History points append to a log and load back in order."""
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JSONListStore(Path(temp_dir))
            points = [HistoryPoint("a", 1516.0, 10.0), HistoryPoint("b", 1484.0, 10.0)]

            written = store.persist_history(points)
            store.persist_history([HistoryPoint("a", 1530.0, 20.0)])

            assert written == 2
            assert list(store.load_history()) == points + [HistoryPoint("a", 1530.0, 20.0)]

    def test_corrupt_history_lines_skipped(self) -> None:
        """Malformed lines are skipped; valid ones still load."""
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JSONListStore(Path(temp_dir))
            store.persist_history([HistoryPoint("a", 1500.0, 1.0)])
            with open(store.history_path, "a", encoding="utf-8") as f:
                f.write("{not json\n")
                f.write('{"item_id": "a", "score": "high", "timestamp": 2.0}\n')
                f.write("\n")
            store.persist_history([HistoryPoint("a", 1510.0, 3.0)])

            loaded = list(store.load_history())

            assert [p.timestamp for p in loaded] == [1.0, 3.0]

    def test_no_history_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            assert list(JSONListStore(Path(temp_dir)).load_history()) == []
