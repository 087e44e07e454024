"""Truncate impact analysis over the foreign key graph."""

from .walker import ImpactNode, ImpactReport, ImpactWalker, TARGET_REASON

__all__ = [
    "ImpactNode",
    "ImpactReport",
    "ImpactWalker",
    "TARGET_REASON",
]
