"""Snapshot persistence."""

from .snapshot_sync import DEFAULT_SYNC_DEBOUNCE_SECONDS, SnapshotSync
from .stores import InMemorySnapshotStore, JsonFileSnapshotStore, SnapshotStore

__all__ = [
    "DEFAULT_SYNC_DEBOUNCE_SECONDS",
    "InMemorySnapshotStore",
    "JsonFileSnapshotStore",
    "SnapshotStore",
    "SnapshotSync",
]
