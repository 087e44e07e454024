"""Catalog adapters - read-only access to foreign key and table metadata."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable

import asyncpg

from .identifiers import quote_table
from .queries import (
    COLUMNS_SQL,
    COUNT_ROWS_SQL,
    LIST_FOREIGN_KEYS_SQL,
    LIST_TABLES_SQL,
    REFERENCING_EDGES_SQL,
    TABLE_EXISTS_SQL,
)
from .types import (
    ColumnInfo,
    DeleteRule,
    ForeignKeyRow,
    ReferenceEdge,
    TableIdentifier,
)


logger = logging.getLogger(__name__)


class CatalogQueryError(Exception):
    """Raised when a catalog query fails (connectivity, permission, syntax)."""
    pass


class CatalogConnectionError(CatalogQueryError):
    """Raised when the database cannot be reached."""
    pass


class CatalogAdapter(ABC):
    """
    Abstract catalog adapter.

    Every method is read-only and issues one round trip to the catalog.
    Failures surface as CatalogQueryError and are never retried here.
    """

    @abstractmethod
    async def find_referencing_edges(self, schema: str, table: str) -> list[ReferenceEdge]:
        """
        Return the foreign keys whose referenced table is `schema.table`.

        Ordered by referencing schema, referencing table, then column and
        constraint name.
        """
        ...

    @abstractmethod
    async def list_tables(self) -> list[TableIdentifier]:
        """List base tables outside system schemas, ordered by schema, table."""
        ...

    @abstractmethod
    async def list_foreign_keys(self) -> list[ForeignKeyRow]:
        """List every foreign key constraint row."""
        ...

    @abstractmethod
    async def count_rows(self, table: TableIdentifier) -> int:
        """Count rows of an allow-listed table."""
        ...

    @abstractmethod
    async def get_columns(self, table: TableIdentifier) -> list[ColumnInfo]:
        """List columns of a table in ordinal order."""
        ...

    async def table_exists(self, table: TableIdentifier) -> bool:
        """Check a table against the catalog listing."""
        return table in await self.list_tables()


def _parse_delete_rule(value: str) -> DeleteRule:
    try:
        return DeleteRule(value)
    except ValueError as e:
        raise CatalogQueryError(f"Unknown delete rule: {value!r}") from e


class PostgresCatalogAdapter(CatalogAdapter):
    """
    Catalog adapter backed by an asyncpg pool and information_schema.

    The pool is shared with other requests; each call acquires its own
    connection, so concurrent calls are independent.
    """

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def _fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        try:
            return await self._pool.fetch(query, *args)
        except asyncio.TimeoutError as e:
            raise CatalogQueryError("Catalog query timed out") from e
        except (asyncpg.PostgresConnectionError, asyncpg.InterfaceError, OSError) as e:
            raise CatalogConnectionError(f"Catalog connection error: {e}") from e
        except asyncpg.PostgresError as e:
            raise CatalogQueryError(f"Catalog query error: {e}") from e

    async def find_referencing_edges(self, schema: str, table: str) -> list[ReferenceEdge]:
        rows = await self._fetch(REFERENCING_EDGES_SQL, schema, table)
        logger.debug(f"{len(rows)} foreign keys reference {schema}.{table}")
        referenced = TableIdentifier(schema=schema, table=table)
        return [
            ReferenceEdge(
                referencing_table=TableIdentifier(
                    schema=row["referencing_schema"],
                    table=row["referencing_table"],
                ),
                referencing_column=row["referencing_column"],
                referenced_table=referenced,
                referenced_column=row["referenced_column"],
                delete_rule=_parse_delete_rule(row["delete_rule"]),
                constraint_name=row["constraint_name"],
            )
            for row in rows
        ]

    async def list_tables(self) -> list[TableIdentifier]:
        rows = await self._fetch(LIST_TABLES_SQL)
        return [
            TableIdentifier(schema=row["schemaname"], table=row["tablename"])
            for row in rows
        ]

    async def list_foreign_keys(self) -> list[ForeignKeyRow]:
        rows = await self._fetch(LIST_FOREIGN_KEYS_SQL)
        return [ForeignKeyRow.from_dict(dict(row)) for row in rows]

    async def count_rows(self, table: TableIdentifier) -> int:
        rows = await self._fetch(COUNT_ROWS_SQL.format(table=quote_table(table)))
        return int(rows[0]["count"])

    async def get_columns(self, table: TableIdentifier) -> list[ColumnInfo]:
        rows = await self._fetch(COLUMNS_SQL, table.schema, table.table)
        return [
            ColumnInfo(
                column_name=row["column_name"],
                data_type=row["data_type"],
                is_nullable=row["is_nullable"],
            )
            for row in rows
        ]

    async def table_exists(self, table: TableIdentifier) -> bool:
        rows = await self._fetch(TABLE_EXISTS_SQL, table.schema, table.table)
        return bool(rows[0][0])


class InMemoryCatalogAdapter(CatalogAdapter):
    """
    Adapter over a fixed set of tables and foreign keys (for tests and demos).

    Edges are returned in the same order the Postgres adapter uses.
    """

    def __init__(
        self,
        tables: Iterable[TableIdentifier] = (),
        edges: Iterable[ReferenceEdge] = (),
        row_counts: dict[TableIdentifier, int] | None = None,
        columns: dict[TableIdentifier, list[ColumnInfo]] | None = None,
    ):
        self.edges = list(edges)
        known = set(tables)
        self._by_referenced: dict[TableIdentifier, list[ReferenceEdge]] = {}
        for edge in self.edges:
            known.add(edge.referencing_table)
            known.add(edge.referenced_table)
            self._by_referenced.setdefault(edge.referenced_table, []).append(edge)
        self.tables = sorted(known, key=lambda t: (t.schema, t.table))
        self.row_counts = row_counts or {}
        self.columns = columns or {}

        # Number of find_referencing_edges calls per table
        self.calls: dict[TableIdentifier, int] = {}

    async def find_referencing_edges(self, schema: str, table: str) -> list[ReferenceEdge]:
        target = TableIdentifier(schema=schema, table=table)
        self.calls[target] = self.calls.get(target, 0) + 1
        return sorted(
            self._by_referenced.get(target, []),
            key=lambda e: (
                e.referencing_table.schema,
                e.referencing_table.table,
                e.referencing_column,
                e.constraint_name or "",
            ),
        )

    async def list_tables(self) -> list[TableIdentifier]:
        return list(self.tables)

    async def list_foreign_keys(self) -> list[ForeignKeyRow]:
        rows = [
            ForeignKeyRow(
                constraint_name=e.constraint_name or "",
                table_schema=e.referencing_table.schema,
                table_name=e.referencing_table.table,
                column_name=e.referencing_column,
                foreign_table_schema=e.referenced_table.schema,
                foreign_table_name=e.referenced_table.table,
                foreign_column_name=e.referenced_column or "",
                delete_rule=e.delete_rule.value,
                update_rule=DeleteRule.NO_ACTION.value,
            )
            for e in self.edges
        ]
        return sorted(rows, key=lambda r: (r.table_schema, r.table_name))

    async def count_rows(self, table: TableIdentifier) -> int:
        if table not in self.tables:
            raise CatalogQueryError(f'relation "{table}" does not exist')
        return self.row_counts.get(table, 0)

    async def get_columns(self, table: TableIdentifier) -> list[ColumnInfo]:
        return list(self.columns.get(table, []))
