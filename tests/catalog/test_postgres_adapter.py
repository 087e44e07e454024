"""Tests for the asyncpg-backed catalog adapter.

The pool is an AsyncMock; records are plain dicts, which support the same
key access as asyncpg.Record.
"""

import asyncio
from unittest.mock import AsyncMock

import asyncpg
import pytest

from pgscope_svc.catalog.adapter import (
    CatalogConnectionError,
    CatalogQueryError,
    PostgresCatalogAdapter,
)
from pgscope_svc.catalog.queries import (
    COLUMNS_SQL,
    LIST_FOREIGN_KEYS_SQL,
    LIST_TABLES_SQL,
    REFERENCING_EDGES_SQL,
    TABLE_EXISTS_SQL,
)
from pgscope_svc.catalog.types import DeleteRule, TableIdentifier


@pytest.fixture
def pool():
    pool = AsyncMock(spec=asyncpg.Pool)
    pool.fetch = AsyncMock(return_value=[])
    return pool


@pytest.fixture
def adapter(pool):
    return PostgresCatalogAdapter(pool)


class TestFindReferencingEdges:
    @pytest.mark.asyncio
    async def test_query_is_parameterized(self, adapter, pool):
        await adapter.find_referencing_edges("public", "customers")

        pool.fetch.assert_awaited_once_with(REFERENCING_EDGES_SQL, "public", "customers")

    @pytest.mark.asyncio
    async def test_rows_mapped_to_edges(self, adapter, pool):
        pool.fetch.return_value = [
            {
                "constraint_name": "orders_customer_id_fkey",
                "referencing_schema": "public",
                "referencing_table": "orders",
                "referencing_column": "customer_id",
                "referenced_column": "id",
                "delete_rule": "CASCADE",
            },
            {
                "constraint_name": "payments_customer_fk",
                "referencing_schema": "billing",
                "referencing_table": "payments",
                "referencing_column": "customer_id",
                "referenced_column": "id",
                "delete_rule": "SET NULL",
            },
        ]

        edges = await adapter.find_referencing_edges("public", "customers")

        assert [e.referencing_table for e in edges] == [
            TableIdentifier("public", "orders"),
            TableIdentifier("billing", "payments"),
        ]
        assert edges[0].referenced_table == TableIdentifier("public", "customers")
        assert edges[0].delete_rule == DeleteRule.CASCADE
        assert edges[1].delete_rule == DeleteRule.SET_NULL
        assert edges[1].constraint_name == "payments_customer_fk"

    @pytest.mark.asyncio
    async def test_adapter_order_preserved(self, adapter, pool):
        pool.fetch.return_value = [
            {
                "constraint_name": f"{name}_fk",
                "referencing_schema": "public",
                "referencing_table": name,
                "referencing_column": "parent_id",
                "referenced_column": "id",
                "delete_rule": "NO ACTION",
            }
            for name in ["zeta", "alpha"]
        ]

        edges = await adapter.find_referencing_edges("public", "parent")

        assert [e.referencing_table.table for e in edges] == ["zeta", "alpha"]

    @pytest.mark.asyncio
    async def test_unknown_delete_rule(self, adapter, pool):
        pool.fetch.return_value = [{
            "constraint_name": "x_fk",
            "referencing_schema": "public",
            "referencing_table": "x",
            "referencing_column": "y_id",
            "referenced_column": "id",
            "delete_rule": "EXPLODE",
        }]

        with pytest.raises(CatalogQueryError, match="EXPLODE"):
            await adapter.find_referencing_edges("public", "y")

    @pytest.mark.asyncio
    async def test_no_edges(self, adapter):
        assert await adapter.find_referencing_edges("public", "leaf") == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_postgres_error_wrapped(self, adapter, pool):
        pool.fetch.side_effect = asyncpg.InsufficientPrivilegeError("permission denied")

        with pytest.raises(CatalogQueryError) as exc_info:
            await adapter.find_referencing_edges("public", "customers")

        assert not isinstance(exc_info.value, CatalogConnectionError)
        assert isinstance(exc_info.value.__cause__, asyncpg.InsufficientPrivilegeError)

    @pytest.mark.asyncio
    async def test_connection_refused(self, adapter, pool):
        pool.fetch.side_effect = ConnectionRefusedError("Connection refused")

        with pytest.raises(CatalogConnectionError):
            await adapter.list_tables()

    @pytest.mark.asyncio
    async def test_interface_error(self, adapter, pool):
        pool.fetch.side_effect = asyncpg.InterfaceError("pool is closed")

        with pytest.raises(CatalogConnectionError):
            await adapter.list_foreign_keys()

    @pytest.mark.asyncio
    async def test_timeout_is_query_error(self, adapter, pool):
        pool.fetch.side_effect = asyncio.TimeoutError()

        with pytest.raises(CatalogQueryError, match="timed out") as exc_info:
            await adapter.list_tables()

        assert not isinstance(exc_info.value, CatalogConnectionError)


class TestListings:
    @pytest.mark.asyncio
    async def test_list_tables(self, adapter, pool):
        pool.fetch.return_value = [
            {"schemaname": "public", "tablename": "customers"},
            {"schemaname": "sales", "tablename": "orders"},
        ]

        tables = await adapter.list_tables()

        pool.fetch.assert_awaited_once_with(LIST_TABLES_SQL)
        assert tables == [TableIdentifier("public", "customers"), TableIdentifier("sales", "orders")]

    @pytest.mark.asyncio
    async def test_list_foreign_keys(self, adapter, pool):
        row = {
            "constraint_name": "orders_customer_id_fkey",
            "table_schema": "public",
            "table_name": "orders",
            "column_name": "customer_id",
            "foreign_table_schema": "public",
            "foreign_table_name": "customers",
            "foreign_column_name": "id",
            "delete_rule": "CASCADE",
            "update_rule": "NO ACTION",
        }
        pool.fetch.return_value = [row]

        rows = await adapter.list_foreign_keys()

        pool.fetch.assert_awaited_once_with(LIST_FOREIGN_KEYS_SQL)
        assert [r.to_dict() for r in rows] == [row]

    @pytest.mark.asyncio
    async def test_count_rows_quotes_identifier(self, adapter, pool):
        pool.fetch.return_value = [{"count": 42}]

        count = await adapter.count_rows(TableIdentifier("Sales", 'odd"name'))

        assert count == 42
        query = pool.fetch.await_args.args[0]
        assert query == 'SELECT COUNT(*) AS count FROM "Sales"."odd""name"'

    @pytest.mark.asyncio
    async def test_get_columns(self, adapter, pool):
        pool.fetch.return_value = [
            {"column_name": "id", "data_type": "integer", "is_nullable": "NO"},
            {"column_name": "email", "data_type": "text", "is_nullable": "YES"},
        ]

        columns = await adapter.get_columns(TableIdentifier("public", "customers"))

        pool.fetch.assert_awaited_once_with(COLUMNS_SQL, "public", "customers")
        assert [c.column_name for c in columns] == ["id", "email"]
        assert columns[0].is_nullable == "NO"

    @pytest.mark.asyncio
    async def test_table_exists(self, adapter, pool):
        pool.fetch.return_value = [(True,)]

        assert await adapter.table_exists(TableIdentifier("public", "customers"))
        pool.fetch.assert_awaited_once_with(TABLE_EXISTS_SQL, "public", "customers")


def normalized(sql):
    return " ".join(sql.split())


class TestForeignKeyQueries:
    """The FK queries resolve both ends of a constraint independently."""

    @pytest.mark.parametrize("query", [REFERENCING_EDGES_SQL, LIST_FOREIGN_KEYS_SQL])
    def test_joins_by_constraint_oids(self, query):
        sql = normalized(query)

        assert "FROM pg_catalog.pg_constraint AS con" in sql
        assert "con.contype = 'f'" in sql
        assert "src.oid = con.conrelid" in sql
        assert "dst.oid = con.confrelid" in sql
        assert "src_ns.oid = src.relnamespace" in sql
        assert "dst_ns.oid = dst.relnamespace" in sql

    @pytest.mark.parametrize("query", [REFERENCING_EDGES_SQL, LIST_FOREIGN_KEYS_SQL])
    def test_composite_columns_paired_by_position(self, query):
        sql = normalized(query)

        assert "unnest(con.conkey, con.confkey)" in sql
        assert "src_col.attrelid = con.conrelid AND src_col.attnum = cols.src_attnum" in sql
        assert "dst_col.attrelid = con.confrelid AND dst_col.attnum = cols.dst_attnum" in sql

    @pytest.mark.parametrize("query", [REFERENCING_EDGES_SQL, LIST_FOREIGN_KEYS_SQL])
    def test_no_schema_coupling_between_ends(self, query):
        sql = normalized(query)

        assert "constraint_column_usage" not in sql
        assert "src_ns.nspname = dst_ns.nspname" not in sql

    def test_referenced_side_is_bound(self):
        sql = normalized(REFERENCING_EDGES_SQL)

        assert "dst_ns.nspname = $1 AND dst.relname = $2" in sql
        assert "src_ns.nspname = $1" not in sql
        assert sql.endswith(
            "ORDER BY referencing_schema, referencing_table, referencing_column, constraint_name"
        )

    @pytest.mark.parametrize("rule", list(DeleteRule))
    def test_every_delete_rule_mapped(self, rule):
        assert f"'{rule.value}'" in REFERENCING_EDGES_SQL

    def test_update_rule_listed(self):
        sql = normalized(LIST_FOREIGN_KEYS_SQL)

        assert "CASE con.confdeltype" in sql
        assert "CASE con.confupdtype" in sql
