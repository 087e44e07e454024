"""
Pydantic models for the pgscope HTTP API.

Field names follow the wire format the web UI expects (camelCase for
request/response envelopes, catalog column names for listing rows).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SimulateTruncateRequest(BaseModel):
    """Body of POST /api/simulate-truncate."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"tableName": "customers", "schemaName": "public"}
        }
    )

    tableName: str = Field(..., description="Table name, optionally schema-qualified")
    schemaName: str | None = Field(None, description="Schema (defaults to public)")


class ImpactNodeModel(BaseModel):
    """One affected table."""

    table: str
    level: int = Field(..., ge=0)
    reason: str
    delete_rule: str | None = None


class SuppressedEdgeModel(BaseModel):
    """A foreign key that led to an already-reported table."""

    constraint_name: str | None = None
    referencing_table: str
    referencing_column: str
    referenced_table: str
    referenced_column: str | None = None
    delete_rule: str


class SimulateTruncateResponse(BaseModel):
    """Response of POST /api/simulate-truncate."""

    affectedTables: list[ImpactNodeModel]
    suppressedEdges: list[SuppressedEdgeModel] = Field(default_factory=list)


class TableCountModel(BaseModel):
    schemaname: str
    tablename: str
    row_count: int


class TableListEntryModel(BaseModel):
    schema_: str = Field(..., alias="schema")
    table: str
    fullName: str

    model_config = ConfigDict(populate_by_name=True)


class ForeignKeyModel(BaseModel):
    constraint_name: str
    table_schema: str
    table_name: str
    column_name: str
    foreign_table_schema: str
    foreign_table_name: str
    foreign_column_name: str
    delete_rule: str
    update_rule: str


class ColumnModel(BaseModel):
    column_name: str
    data_type: str
    is_nullable: str


class TableDetailsResponse(BaseModel):
    """Response of GET /api/table-details/{schema}/{table}."""

    count: int
    columns: list[ColumnModel]


class HealthResponse(BaseModel):
    status: str
    database: dict[str, Any]
    cache: dict[str, Any]


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
