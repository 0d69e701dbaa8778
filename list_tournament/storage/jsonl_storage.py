"""
JSON/JSONL storage implementation.

Persists each list's latest snapshot to a JSON file and every saved revision
to an append-only JSONL file. History points are appended to a shared JSONL
log. Writes check the stored version first (optimistic concurrency).
"""

import json
import re
import threading
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path

from typing_extensions import override

from ..exceptions import ListNotFound, ValidationError, VersionConflict
from ..interfaces import ListStore
from ..logging_config import get_logger
from ..models import HistoryPoint, ItemList
from ..serialization import history_point_from_state, history_point_to_state, list_from_state, list_to_state

# Module-level logger
logger = get_logger("jsonl_storage")

_SAFE_ID = re.compile(r'[A-Za-z0-9][A-Za-z0-9._-]*')


class JSONListStore(ListStore):
    """
    File-based ListStore.

    Layout under the root directory:
        lists/<id>.json             latest snapshot (rewritten on every save)
        lists/<id>.revisions.jsonl  append-only log of every saved snapshot
        history.jsonl               append-only log of history points
    """

    root: Path
    lists_dir: Path
    history_path: Path

    def __init__(self, root: Path):
        """
        Initialize JSON list storage.

        Args:
            root: Directory holding the store files (created if missing)
        """
        self.root = Path(root)
        self.lists_dir = self.root / "lists"
        self.history_path = self.root / "history.jsonl"
        self._lock: threading.Lock = threading.Lock()

        # Ensure directories exist
        self.lists_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"JSON list store initialized: lists={self.lists_dir}, history={self.history_path}")

    def _snapshot_path(self, list_id: str) -> Path:
        if not _SAFE_ID.fullmatch(list_id):
            raise ValidationError(f"List id cannot be used as a file name: {list_id!r}")
        return self.lists_dir / f"{list_id}.json"

    def _revisions_path(self, list_id: str) -> Path:
        return self.lists_dir / f"{list_id}.revisions.jsonl"

    def _read(self, list_id: str) -> ItemList | None:
        path = self._snapshot_path(list_id)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load list snapshot from {path}: {e}")
            raise ValidationError(f"Corrupt list snapshot {path}: {e}") from e
        return list_from_state(data)

    @override
    def get_list(self, list_id: str) -> ItemList:
        """Load the latest snapshot of a list."""
        with self._lock:
            stored = self._read(list_id)
        if stored is None:
            raise ListNotFound(list_id)
        logger.debug(f"Loaded list {list_id} at version {stored.version}")
        return stored

    @override
    def save_list(self, item_list: ItemList, expected_version: int) -> int:
        """Write a snapshot if the stored version matches, returning the new version."""
        with self._lock:
            stored = self._read(item_list.id)
            current = stored.version if stored is not None else 0
            if current != expected_version:
                logger.warning(
                    f"Rejected stale write to list {item_list.id}: expected {expected_version}, stored {current}"
                )
                raise VersionConflict(item_list.id, expected_version, current)

            new_version = current + 1
            state = list_to_state(replace(item_list, version=new_version))

            # Write to JSON file (latest snapshot)
            with open(self._snapshot_path(item_list.id), "w", encoding="utf-8") as f:
                json.dump(state, f, indent=2, ensure_ascii=False)

            # Append to JSONL file (historical revisions)
            with open(self._revisions_path(item_list.id), "a", encoding="utf-8") as f:
                json.dump(state, f, ensure_ascii=False)
                f.write("\n")

        logger.info(f"Saved list {item_list.id} at version {new_version}")
        return new_version

    def list_ids(self) -> list[str]:
        """Ids of all stored lists."""
        return sorted(
            p.stem for p in self.lists_dir.glob("*.json")
        )

    def revision_count(self, list_id: str) -> int:
        """Number of saved revisions of a list."""
        path = self._revisions_path(list_id)
        if not path.exists():
            return 0
        with open(path, "r", encoding="utf-8") as f:
            return sum(1 for line in f if line.strip())

    def persist_history(self, points: Iterable[HistoryPoint]) -> int:
        """Append history points to the history log. Returns the number written."""
        count = 0
        with self._lock, open(self.history_path, "a", encoding="utf-8") as f:
            for point in points:
                json.dump(history_point_to_state(point), f, ensure_ascii=False)
                f.write("\n")
                count += 1
        logger.debug(f"Persisted {count} history points to {self.history_path}")
        return count

    def load_history(self) -> Iterator[HistoryPoint]:
        """Load all persisted history points, skipping corrupt lines."""
        if not self.history_path.exists():
            return

        with open(self.history_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue

                try:
                    yield history_point_from_state(json.loads(line))
                except (json.JSONDecodeError, ValidationError) as e:
                    # Skip corrupted or invalid lines
                    logger.warning(f"Skipping invalid JSON line in {self.history_path}: {e}")
                    continue
