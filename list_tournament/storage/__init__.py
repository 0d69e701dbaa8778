"""
List store implementations.
"""

from .jsonl_storage import JSONListStore
from .memory_store import InMemoryListStore

__all__ = ["InMemoryListStore", "JSONListStore"]
