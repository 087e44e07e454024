"""Catalog types - table identifiers, reference edges, and listing records."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any


DEFAULT_SCHEMA = "public"


class DeleteRule(str, Enum):
    """ON DELETE action of a foreign key constraint."""
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"


@dataclass(frozen=True, slots=True)
class TableIdentifier:
    """
    Schema-qualified table name.

    Compared by exact string equality of schema and table; no case folding
    and no quote stripping.
    """
    schema: str
    table: str

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.table}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class ReferenceEdge:
    """A foreign key pointing at `referenced_table` from `referencing_table`."""
    referencing_table: TableIdentifier
    referencing_column: str
    referenced_table: TableIdentifier
    delete_rule: DeleteRule
    constraint_name: str | None = None
    referenced_column: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "constraint_name": self.constraint_name,
            "referencing_table": self.referencing_table.full_name,
            "referencing_column": self.referencing_column,
            "referenced_table": self.referenced_table.full_name,
            "referenced_column": self.referenced_column,
            "delete_rule": self.delete_rule.value,
        }


@dataclass(frozen=True, slots=True)
class TableCount:
    """Row count for one table (table-counts snapshot entry)."""
    schemaname: str
    tablename: str
    row_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaname": self.schemaname,
            "tablename": self.tablename,
            "row_count": self.row_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TableCount:
        return cls(
            schemaname=data["schemaname"],
            tablename=data["tablename"],
            row_count=int(data["row_count"]),
        )


@dataclass(frozen=True, slots=True)
class TableListEntry:
    """One entry of the tables-list snapshot."""
    schema: str
    table: str

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.table}"

    def to_dict(self) -> dict[str, Any]:
        return {"schema": self.schema, "table": self.table, "fullName": self.full_name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TableListEntry:
        return cls(schema=data["schema"], table=data["table"])


@dataclass(frozen=True, slots=True)
class ForeignKeyRow:
    """A foreign key constraint row as returned by the FK listing query."""
    constraint_name: str
    table_schema: str
    table_name: str
    column_name: str
    foreign_table_schema: str
    foreign_table_name: str
    foreign_column_name: str
    delete_rule: str
    update_rule: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "constraint_name": self.constraint_name,
            "table_schema": self.table_schema,
            "table_name": self.table_name,
            "column_name": self.column_name,
            "foreign_table_schema": self.foreign_table_schema,
            "foreign_table_name": self.foreign_table_name,
            "foreign_column_name": self.foreign_column_name,
            "delete_rule": self.delete_rule,
            "update_rule": self.update_rule,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ForeignKeyRow:
        return cls(**{f.name: data[f.name] for f in fields(cls)})


@dataclass(frozen=True, slots=True)
class ColumnInfo:
    """Column metadata from information_schema.columns."""
    column_name: str
    data_type: str
    is_nullable: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "column_name": self.column_name,
            "data_type": self.data_type,
            "is_nullable": self.is_nullable,
        }


@dataclass(frozen=True, slots=True)
class TableDetails:
    """Row count and columns of a single table."""
    table: TableIdentifier
    count: int
    columns: list[ColumnInfo]
