"""Shared test fixtures for pgscope tests.

Catalog state is modelled with InMemoryCatalogAdapter, so walker and service
tests never need a live PostgreSQL instance.
"""

from __future__ import annotations

from typing import Callable

import pytest

from pgscope_svc.cache.snapshot import SnapshotCache
from pgscope_svc.catalog.adapter import InMemoryCatalogAdapter
from pgscope_svc.catalog.types import DeleteRule, ReferenceEdge, TableIdentifier
from pgscope_svc.config import Config
from pgscope_svc.service import InspectorService


# =============================================================================
# Catalog Builders
# =============================================================================

def _table(name: str) -> TableIdentifier:
    if "." in name:
        schema, table = name.split(".", 1)
        return TableIdentifier(schema=schema, table=table)
    return TableIdentifier(schema="public", table=name)


@pytest.fixture
def table() -> Callable[[str], TableIdentifier]:
    """Build a TableIdentifier from "table" or "schema.table"."""
    return _table


@pytest.fixture
def edge() -> Callable[..., ReferenceEdge]:
    """Build a foreign key edge: edge(child, column, parent, rule)."""

    def make(
        child: str,
        column: str,
        parent: str,
        rule: DeleteRule = DeleteRule.CASCADE,
        constraint_name: str | None = None,
    ) -> ReferenceEdge:
        child_id = _table(child)
        return ReferenceEdge(
            referencing_table=child_id,
            referencing_column=column,
            referenced_table=_table(parent),
            referenced_column="id",
            delete_rule=rule,
            constraint_name=constraint_name or f"{child_id.table}_{column}_fkey",
        )

    return make


@pytest.fixture
def shop_adapter(edge, table) -> InMemoryCatalogAdapter:
    """
    Small shop schema:

        customers <- orders <- order_items
        customers <- invoices <- invoice_lines
        orders, invoices <- shipments (diamond)
        employees <- employees (self-reference)
    """
    return InMemoryCatalogAdapter(
        tables=[table("products"), table("audit.events")],
        edges=[
            edge("orders", "customer_id", "customers", DeleteRule.CASCADE),
            edge("invoices", "customer_id", "customers", DeleteRule.RESTRICT),
            edge("order_items", "order_id", "orders", DeleteRule.CASCADE),
            edge("invoice_lines", "invoice_id", "invoices", DeleteRule.CASCADE),
            edge("shipments", "order_id", "orders", DeleteRule.SET_NULL),
            edge("shipments", "invoice_id", "invoices", DeleteRule.NO_ACTION),
            edge("employees", "manager_id", "employees", DeleteRule.SET_NULL),
        ],
        row_counts={
            table("customers"): 120,
            table("orders"): 4500,
            table("order_items"): 13200,
            table("invoices"): 4100,
            table("products"): 120,
        },
    )


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def config() -> Config:
    """Default test configuration."""
    return Config()


@pytest.fixture
def snapshot_cache(tmp_path) -> SnapshotCache:
    """Snapshot cache in a temporary directory."""
    return SnapshotCache(directory=tmp_path / "cache")


@pytest.fixture
def service(shop_adapter, snapshot_cache, config) -> InspectorService:
    """InspectorService over the shop schema."""
    return InspectorService(
        adapter=shop_adapter,
        cache=snapshot_cache,
        config=config,
    )
