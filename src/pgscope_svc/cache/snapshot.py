"""JSON snapshot cache for catalog listings.

Each snapshot is a single JSON document on disk (table counts, tables list,
foreign keys). Reads are read-through: the file is served if present, unless
the caller asks for a refresh. There is no expiry and no versioning.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable


logger = logging.getLogger(__name__)


class Snapshot(str, Enum):
    """Known snapshot documents."""
    TABLE_COUNTS = "table_counts"
    TABLES_LIST = "tables_list"
    FOREIGN_KEYS = "foreign_keys"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read or written."""
    pass


@dataclass
class SnapshotCache:
    """
    File-backed cache of JSON documents.

    Writes go to a temporary file first and are renamed into place, so a
    reader never sees a half-written snapshot.
    """
    directory: Path
    enabled: bool = True

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    # Stats
    _hits: int = field(default=0, init=False)
    _misses: int = field(default=0, init=False)
    _writes: int = field(default=0, init=False)

    def __post_init__(self):
        self.directory = Path(self.directory)
        if self.enabled:
            self.directory.mkdir(parents=True, exist_ok=True)

    def path(self, snapshot: Snapshot) -> Path:
        return self.directory / snapshot.filename

    def exists(self, snapshot: Snapshot) -> bool:
        return self.enabled and self.path(snapshot).exists()

    def read(self, snapshot: Snapshot) -> Any | None:
        """
        Read a snapshot document.

        Returns None if caching is disabled or the file does not exist.

        Raises:
            SnapshotError: If the file exists but is not valid JSON
        """
        if not self.exists(snapshot):
            self._misses += 1
            return None

        path = self.path(snapshot)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e

        self._hits += 1
        logger.info(f"Serving {snapshot.label} from cache")
        return data

    async def write(self, snapshot: Snapshot, data: Any) -> None:
        """Atomically replace a snapshot document."""
        if not self.enabled:
            return

        path = self.path(snapshot)
        async with self._lock:
            try:
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.directory, prefix=f".{snapshot.value}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, path)
            except OSError as e:
                raise SnapshotError(f"Cannot write snapshot {path}: {e}") from e

        self._writes += 1
        logger.info(f"{snapshot.label.capitalize()} cached to file")

    async def get_or_load(
        self,
        snapshot: Snapshot,
        loader: Callable[[], Awaitable[Any]],
        refresh: bool = False,
    ) -> Any:
        """
        Serve a snapshot, or load and store it.

        This is the read-through pattern used by the listing endpoints.
        """
        if not refresh:
            data = self.read(snapshot)
            if data is not None:
                return data

        logger.info(f"Fetching fresh {snapshot.label} from database...")
        data = await loader()
        await self.write(snapshot, data)
        return data

    def clear(self) -> int:
        """Delete all snapshot files. Returns count removed."""
        removed = 0
        for snapshot in Snapshot:
            path = self.path(snapshot)
            if path.exists():
                path.unlink()
                removed += 1
        return removed

    @property
    def stats(self) -> dict:
        """Cache statistics."""
        return {
            "enabled": self.enabled,
            "directory": str(self.directory),
            "snapshots": [s.value for s in Snapshot if self.exists(s)],
            "hits": self._hits,
            "misses": self._misses,
            "writes": self._writes,
        }
