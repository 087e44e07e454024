"""Core service layer - catalog listings and truncate simulation.

The inspector service never modifies data. It reads the catalog, counts
rows, and simulates which tables a TRUNCATE would reach through foreign keys.

Flow for a simulation:
1. Caller supplies a table name (optionally with a schema)
2. Name is parsed into a canonical schema.table identifier
3. A fresh walker traverses the foreign key graph from that table
4. The ordered impact report is returned
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from .cache.snapshot import Snapshot, SnapshotCache
from .catalog.adapter import CatalogAdapter, CatalogConnectionError, CatalogQueryError
from .catalog.identifiers import parse_table_name
from .catalog.types import (
    ForeignKeyRow,
    TableCount,
    TableDetails,
    TableIdentifier,
    TableListEntry,
)
from .config import Config
from .impact.walker import ImpactReport, ImpactWalker


logger = logging.getLogger(__name__)


class NotFoundError(Exception):
    """Raised when a table is not present in the catalog listing."""
    pass


class SimulationTimeoutError(Exception):
    """Raised when a truncate simulation exceeds its deadline."""

    def __init__(self, table: TableIdentifier, timeout_seconds: float):
        super().__init__(
            f"Simulation for {table} exceeded {timeout_seconds:g}s deadline"
        )
        self.table = table
        self.timeout_seconds = timeout_seconds


def tables_list_from_counts(counts: list[TableCount]) -> list[TableListEntry]:
    """Derive the tables list from table counts, keeping their order."""
    return [TableListEntry(schema=c.schemaname, table=c.tablename) for c in counts]


@dataclass
class InspectorService:
    """
    Table inspection service.

    Responsibilities:
    - Table row counts and the derived tables list (snapshot cached)
    - Foreign key listing (snapshot cached)
    - Per-table details (row count and columns)
    - Truncate simulation (always live, never cached)
    """
    adapter: CatalogAdapter
    cache: SnapshotCache
    config: Config = field(default_factory=Config)

    async def table_counts(self, refresh: bool = False) -> list[TableCount]:
        """Row counts for every base table, largest first."""
        data = await self.cache.get_or_load(
            Snapshot.TABLE_COUNTS,
            self._load_table_counts,
            refresh=refresh,
        )
        return [TableCount.from_dict(row) for row in data]

    async def _load_table_counts(self) -> list[dict]:
        tables = await self.adapter.list_tables()
        semaphore = asyncio.Semaphore(max(1, self.config.database.count_concurrency))

        async def count(table: TableIdentifier) -> TableCount:
            async with semaphore:
                try:
                    row_count = await self.adapter.count_rows(table)
                except CatalogConnectionError:
                    # Nothing is cached when the database is gone
                    raise
                except CatalogQueryError as e:
                    logger.error(f"Error counting {table}: {e}")
                    row_count = 0
            return TableCount(schemaname=table.schema, tablename=table.table, row_count=row_count)

        counts = await asyncio.gather(*(count(t) for t in tables))
        # sorted() is stable, so equal counts keep schema/table order
        counts = sorted(counts, key=lambda c: c.row_count, reverse=True)

        await self.cache.write(
            Snapshot.TABLES_LIST,
            [entry.to_dict() for entry in tables_list_from_counts(counts)],
        )
        return [c.to_dict() for c in counts]

    async def tables_list(self) -> list[TableListEntry]:
        """
        Tables list from cache.

        Falls back to deriving it from the table counts snapshot; returns an
        empty list if neither snapshot exists.
        """
        data = self.cache.read(Snapshot.TABLES_LIST)
        if data is not None:
            return [TableListEntry.from_dict(row) for row in data]

        counts = self.cache.read(Snapshot.TABLE_COUNTS)
        if counts is None:
            return []

        entries = tables_list_from_counts([TableCount.from_dict(row) for row in counts])
        await self.cache.write(Snapshot.TABLES_LIST, [e.to_dict() for e in entries])
        return entries

    async def foreign_keys(self, refresh: bool = False) -> list[ForeignKeyRow]:
        """All foreign key constraint rows."""

        async def load() -> list[dict]:
            rows = await self.adapter.list_foreign_keys()
            return [row.to_dict() for row in rows]

        data = await self.cache.get_or_load(Snapshot.FOREIGN_KEYS, load, refresh=refresh)
        return [ForeignKeyRow.from_dict(row) for row in data]

    async def table_details(self, schema: str, table: str) -> TableDetails:
        """
        Row count and columns for one table.

        The table must appear in the catalog listing before its name is
        used in a COUNT(*) statement.

        Raises:
            MalformedIdentifierError: If the name cannot be parsed
            NotFoundError: If the table is not a known base table
        """
        identifier = parse_table_name(table, schema)
        if not await self.adapter.table_exists(identifier):
            raise NotFoundError(f"Table not found: {identifier}")

        count = await self.adapter.count_rows(identifier)
        columns = await self.adapter.get_columns(identifier)
        return TableDetails(table=identifier, count=count, columns=columns)

    async def simulate_truncate(
        self,
        table_name: str,
        schema_name: str | None = None,
    ) -> ImpactReport:
        """
        Simulate truncating a table and report every affected table.

        Raises:
            MalformedIdentifierError: If the name cannot be parsed
            CatalogQueryError: If any catalog query fails (no partial result)
            SimulationTimeoutError: If the configured deadline is exceeded
        """
        start = parse_table_name(table_name, schema_name)
        logger.info(f"Simulating truncate of {start}")

        walker = ImpactWalker(self.adapter)
        timeout = self.config.impact.timeout_seconds
        began = time.perf_counter()

        if timeout > 0:
            try:
                report = await asyncio.wait_for(walker.walk(start), timeout=timeout)
            except asyncio.TimeoutError:
                raise SimulationTimeoutError(start, timeout)
        else:
            report = await walker.walk(start)

        elapsed = (time.perf_counter() - began) * 1000
        logger.info(
            f"Truncate of {start} affects {len(report.nodes) - 1} other tables "
            f"(max level {report.max_level}, {len(report.suppressed_edges)} suppressed edges, "
            f"{report.catalog_calls} catalog calls, {elapsed:.1f}ms)"
        )
        return report
