"""Snapshot cache for catalog listings."""

from .snapshot import Snapshot, SnapshotCache, SnapshotError

__all__ = [
    "Snapshot",
    "SnapshotCache",
    "SnapshotError",
]
