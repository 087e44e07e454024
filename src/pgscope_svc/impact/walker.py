"""Truncate impact analysis - transitive walk over foreign key references.

Starting from a target table, every table that references it (directly or
through a chain of foreign keys) is reported once, with its distance from the
target and the constraint that pulled it in.

Walk order is a pre-order depth-first traversal driven by an explicit stack,
visiting referencing tables in the order the catalog adapter returns them.
A table reachable through several paths is reported at the first path that
reaches it; later edges into an already-visited table are recorded as
suppressed instead of producing a node. This also covers self-references and
reference cycles.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from ..catalog.adapter import CatalogAdapter
from ..catalog.types import DeleteRule, ReferenceEdge, TableIdentifier


logger = logging.getLogger(__name__)

TARGET_REASON = "target table"


@dataclass(frozen=True, slots=True)
class ImpactNode:
    """One table affected by truncating the target."""
    table: TableIdentifier
    level: int
    reason: str
    delete_rule: DeleteRule | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "table": self.table.full_name,
            "level": self.level,
            "reason": self.reason,
        }
        if self.delete_rule is not None:
            data["delete_rule"] = self.delete_rule.value
        return data


@dataclass
class ImpactReport:
    """Result of a truncate simulation."""
    target: TableIdentifier
    nodes: list[ImpactNode] = field(default_factory=list)

    # Edges consumed without emitting a node (target already visited)
    suppressed_edges: list[ReferenceEdge] = field(default_factory=list)

    # Catalog round trips made during the walk
    catalog_calls: int = 0
    elapsed_ms: float = 0.0

    @property
    def max_level(self) -> int:
        return max((n.level for n in self.nodes), default=0)

    @property
    def self_references(self) -> list[ReferenceEdge]:
        return [
            e for e in self.suppressed_edges
            if e.referencing_table == e.referenced_table
        ]


def reference_reason(edge: ReferenceEdge) -> str:
    """Human-readable reason for a table pulled in through `edge`."""
    return f"References {edge.referenced_table.full_name} via {edge.referencing_column}"


@dataclass(frozen=True, slots=True)
class _Visit:
    """Pending visit on the walk stack."""
    table: TableIdentifier
    depth: int
    edge: ReferenceEdge | None = None


class ImpactWalker:
    """
    Walks the foreign key graph for one simulation.

    The visited-set lives inside a single walk() call, so a walker can be
    reused for independent simulations without sharing state between them.
    """

    def __init__(self, adapter: CatalogAdapter):
        self.adapter = adapter

    async def walk(self, start: TableIdentifier) -> ImpactReport:
        """
        Build the impact report for truncating `start`.

        Each reachable table triggers exactly one adapter call, on first
        visit. Any CatalogQueryError aborts the whole walk.
        """
        started = time.perf_counter()
        report = ImpactReport(target=start)
        visited: set[TableIdentifier] = set()
        stack: list[_Visit] = [_Visit(table=start, depth=0)]

        while stack:
            visit = stack.pop()

            if visit.table in visited:
                if visit.edge is not None:
                    report.suppressed_edges.append(visit.edge)
                continue
            visited.add(visit.table)

            if visit.edge is None:
                node = ImpactNode(table=visit.table, level=0, reason=TARGET_REASON)
            else:
                node = ImpactNode(
                    table=visit.table,
                    level=visit.depth,
                    reason=reference_reason(visit.edge),
                    delete_rule=visit.edge.delete_rule,
                )
            report.nodes.append(node)

            edges = await self.adapter.find_referencing_edges(
                visit.table.schema, visit.table.table
            )
            report.catalog_calls += 1
            logger.debug(f"{visit.table} (level {visit.depth}): {len(edges)} referencing edges")

            # Reversed so the first edge is popped first
            for edge in reversed(edges):
                stack.append(_Visit(
                    table=edge.referencing_table,
                    depth=visit.depth + 1,
                    edge=edge,
                ))

        report.elapsed_ms = (time.perf_counter() - started) * 1000
        return report

    async def simulate_truncate(self, start: TableIdentifier) -> list[ImpactNode]:
        """Ordered impact nodes for truncating `start`."""
        report = await self.walk(start)
        return report.nodes
