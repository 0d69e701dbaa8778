"""
In-memory list store.

Reference ListStore for tests and embedding: keeps the latest snapshot of
every list and enforces optimistic concurrency on save.
"""

import threading
from dataclasses import replace

from typing_extensions import override

from ..exceptions import ListNotFound, VersionConflict
from ..interfaces import ListStore
from ..logging_config import get_logger
from ..models import ItemList

logger = get_logger("memory_store")


class InMemoryListStore(ListStore):
    """Dictionary-backed ListStore guarded by a lock."""

    def __init__(self):
        self._lists: dict[str, ItemList] = {}
        self._lock: threading.Lock = threading.Lock()

    @override
    def get_list(self, list_id: str) -> ItemList:
        with self._lock:
            stored = self._lists.get(list_id)
        if stored is None:
            raise ListNotFound(list_id)
        return stored

    @override
    def save_list(self, item_list: ItemList, expected_version: int) -> int:
        with self._lock:
            stored = self._lists.get(item_list.id)
            current = stored.version if stored is not None else 0
            if current != expected_version:
                logger.warning(
                    f"Rejected stale write to list {item_list.id}: expected {expected_version}, stored {current}"
                )
                raise VersionConflict(item_list.id, expected_version, current)
            new_version = current + 1
            self._lists[item_list.id] = replace(item_list, version=new_version)
        logger.debug(f"Saved list {item_list.id} at version {new_version}")
        return new_version

    def list_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._lists)
