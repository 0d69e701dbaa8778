"""
Tests for the command line interface.
"""

import json
import tempfile
from pathlib import Path

import pytest

from list_tournament.__main__ import main
from list_tournament.storage import JSONListStore


def write_list(directory: Path, items: list[dict]) -> Path:
    path = directory / "list.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"id": "tracks", "owner": "carol", "items": items}, f)
    return path


ITEMS = [
    {"id": "a", "name": "Aria", "score": 1600, "attributes": {"year": 1990}},
    {"id": "b", "name": "Ballad", "score": 1500, "attributes": {"year": 2005}},
    {"id": "c", "name": "Canon", "score": 1400, "attributes": {"year": 1700}},
    {"id": "d", "name": "Dirge", "score": 1300, "attributes": {"year": 2010}},
]


class TestCLI:
    """Run main() end to end against a temporary store."""

    def test_import_then_query(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            root = Path(temp_dir)
            source = write_list(root, ITEMS)
            store_dir = str(root / "store")

            # Act
            main(["--store-dir", store_dir, "import", str(source)])
            main(["--store-dir", store_dir, "query", "tracks", "--query", "year > 1980 order by year desc"])

            # Assert
            out = capsys.readouterr().out
            assert "Imported list tracks (4 items), version 1" in out
            assert out.index("Dirge") < out.index("Ballad") < out.index("Aria")
            assert "Canon" not in out

    def test_query_save_stores_query(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            store_dir = str(root / "store")
            main(["--store-dir", store_dir, "import", str(write_list(root, ITEMS))])

            main(["--store-dir", store_dir, "query", "tracks", "--query", "score >= 1500", "--save"])

            stored = JSONListStore(root / "store").get_list("tracks")
            assert stored.version == 2
            assert stored.query is not None
            assert "Saved query on list tracks, version 2" in capsys.readouterr().out

    def test_reimport_merges(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            store_dir = str(root / "store")
            main(["--store-dir", store_dir, "import", str(write_list(root, ITEMS))])

            extra = [{"id": "e", "name": "Etude"}, {"id": "a", "name": "Aria (remaster)", "score": 1}]
            main(["--store-dir", store_dir, "import", str(write_list(root, extra))])

            stored = JSONListStore(root / "store").get_list("tracks")
            assert [i.id for i in stored.items] == ["a", "b", "c", "d", "e"]
            assert stored.get_item("a").name == "Aria (remaster)"
            assert stored.get_item("a").score == 1600
            assert "Merged into list tracks (5 items), version 2" in capsys.readouterr().out

    def test_simulate_and_history(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Higher score wins every simulated match; history is persisted."""
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            store_dir = str(root / "store")
            main(["--store-dir", store_dir, "import", str(write_list(root, ITEMS))])

            main(["--store-dir", store_dir, "simulate", "tracks"])
            main(["--store-dir", store_dir, "history", "a"])

            store = JSONListStore(root / "store")
            stored = store.get_list("tracks")
            assert stored.get_item("a").rank == 1
            assert stored.get_item("a").wins == 2
            assert len(list(store.load_history())) == 6
            out = capsys.readouterr().out
            assert "Saved list tracks, version 2" in out
            assert "Weighted" in out

    def test_history_without_points(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            main(["--store-dir", temp_dir, "history", "nobody"])

            assert "No history for nobody" in capsys.readouterr().out

    def test_errors_exit_with_status_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            main(["--store-dir", temp_dir, "import", str(write_list(root, ITEMS))])

            with pytest.raises(SystemExit) as exc_info:
                main(["--store-dir", temp_dir, "query", "tracks", "--query", "rating > 3"])

            assert exc_info.value.code == 1
            assert "Unknown field: rating" in capsys.readouterr().err

    def test_missing_list_exits(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with pytest.raises(SystemExit) as exc_info:
                main(["--store-dir", temp_dir, "simulate", "ghost"])

            assert exc_info.value.code == 1
