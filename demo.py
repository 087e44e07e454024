#!/usr/bin/env python3
"""
pgscope Demo Script

Runs truncate simulations against a small in-memory schema, no database
needed. Shows how the walker handles chains, diamonds, self-references,
and reference cycles.

    pip install -e .
    python demo.py
"""

from __future__ import annotations

import asyncio

from colorama import Fore, Style, init as colorama_init

from pgscope_svc.catalog.adapter import InMemoryCatalogAdapter
from pgscope_svc.catalog.types import DeleteRule, ReferenceEdge, TableIdentifier
from pgscope_svc.impact.walker import ImpactWalker


def c(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def header(text: str) -> None:
    print(f"\n{c('=' * 60, Style.DIM)}")
    print(c(f"  {text}", Style.BRIGHT))
    print(c('=' * 60, Style.DIM))


def t(name: str) -> TableIdentifier:
    schema, table = name.split(".") if "." in name else ("public", name)
    return TableIdentifier(schema=schema, table=table)


def fk(child: str, column: str, parent: str, rule: DeleteRule) -> ReferenceEdge:
    return ReferenceEdge(
        referencing_table=t(child),
        referencing_column=column,
        referenced_table=t(parent),
        referenced_column="id",
        delete_rule=rule,
        constraint_name=f"{t(child).table}_{column}_fkey",
    )


def sample_adapter() -> InMemoryCatalogAdapter:
    """A small shop schema with one self-reference and one cycle."""
    return InMemoryCatalogAdapter(edges=[
        fk("orders", "customer_id", "customers", DeleteRule.CASCADE),
        fk("invoices", "customer_id", "customers", DeleteRule.RESTRICT),
        fk("order_items", "order_id", "orders", DeleteRule.CASCADE),
        fk("invoice_lines", "invoice_id", "invoices", DeleteRule.CASCADE),
        # Diamond: shipments reached through both orders and invoices
        fk("shipments", "order_id", "orders", DeleteRule.SET_NULL),
        fk("shipments", "invoice_id", "invoices", DeleteRule.NO_ACTION),
        # Self-reference
        fk("employees", "manager_id", "employees", DeleteRule.SET_NULL),
        fk("customers", "account_manager_id", "employees", DeleteRule.SET_NULL),
        # Cycle across schemas
        fk("billing.accounts", "primary_contact_id", "billing.contacts", DeleteRule.SET_NULL),
        fk("billing.contacts", "account_id", "billing.accounts", DeleteRule.CASCADE),
    ])


async def simulate(walker: ImpactWalker, name: str) -> None:
    header(f"TRUNCATE {name}")
    report = await walker.walk(t(name))

    for node in report.nodes:
        indent = "  " * node.level
        rule = c(f"[{node.delete_rule.value}]", Fore.RED) if node.delete_rule else ""
        print(f"  {indent}{c(node.table.full_name, Fore.CYAN)} {rule} {c(node.reason, Style.DIM)}")

    if report.suppressed_edges:
        print(c("\n  Already reported:", Style.BRIGHT))
        for edge in report.suppressed_edges:
            print(
                f"    {edge.referencing_table}.{edge.referencing_column} -> "
                f"{edge.referenced_table} [{edge.delete_rule.value}]"
            )

    print(c(f"\n  {report.catalog_calls} catalog calls, max level {report.max_level}", Style.DIM))


async def main() -> None:
    colorama_init()
    walker = ImpactWalker(sample_adapter())

    await simulate(walker, "employees")
    await simulate(walker, "billing.accounts")
    await simulate(walker, "order_items")


if __name__ == "__main__":
    asyncio.run(main())
