"""Catalog access - identifiers, information_schema queries, adapters."""

from .adapter import (
    CatalogAdapter,
    CatalogConnectionError,
    CatalogQueryError,
    InMemoryCatalogAdapter,
    PostgresCatalogAdapter,
)
from .identifiers import MalformedIdentifierError, parse_table_name, quote_ident, quote_table
from .types import (
    ColumnInfo,
    DeleteRule,
    ForeignKeyRow,
    ReferenceEdge,
    TableCount,
    TableDetails,
    TableIdentifier,
    TableListEntry,
)

__all__ = [
    # Adapters
    "CatalogAdapter",
    "PostgresCatalogAdapter",
    "InMemoryCatalogAdapter",
    # Errors
    "CatalogQueryError",
    "CatalogConnectionError",
    "MalformedIdentifierError",
    # Identifiers
    "parse_table_name",
    "quote_ident",
    "quote_table",
    # Types
    "ColumnInfo",
    "DeleteRule",
    "ForeignKeyRow",
    "ReferenceEdge",
    "TableCount",
    "TableDetails",
    "TableIdentifier",
    "TableListEntry",
]
