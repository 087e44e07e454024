"""Table identifier parsing and quoting."""

from __future__ import annotations

from .types import DEFAULT_SCHEMA, TableIdentifier


class MalformedIdentifierError(ValueError):
    """Raised when a table name cannot be parsed into schema and table."""
    pass


# PostgreSQL truncates identifiers at NAMEDATALEN - 1 bytes
MAX_IDENTIFIER_LENGTH = 63


def parse_table_name(name: str, schema: str | None = None) -> TableIdentifier:
    """
    Parse a table name into a canonical TableIdentifier.

    Args:
        name: "table" or "schema.table"
        schema: Optional schema; when given it is prefixed to `name`

    Returns:
        TableIdentifier, with schema defaulting to "public"

    Raises:
        MalformedIdentifierError: On empty names, empty parts, surrounding
            whitespace, more than one separator, or parts longer than
            PostgreSQL allows
    """
    if name is None or not name.strip():
        raise MalformedIdentifierError("Table name is required")

    full_name = f"{schema}.{name}" if schema else name
    parts = full_name.split(".")

    if len(parts) > 2:
        raise MalformedIdentifierError(
            f"Table name must be 'table' or 'schema.table': {full_name!r}"
        )

    if len(parts) == 1:
        parts = [DEFAULT_SCHEMA, parts[0]]

    schema_name, table_name = parts
    for part in (schema_name, table_name):
        if not part:
            raise MalformedIdentifierError(f"Empty identifier part in {full_name!r}")
        if part != part.strip():
            raise MalformedIdentifierError(
                f"Leading or trailing whitespace in identifier {part!r}"
            )
        if len(part.encode("utf-8")) > MAX_IDENTIFIER_LENGTH:
            raise MalformedIdentifierError(
                f"Identifier longer than {MAX_IDENTIFIER_LENGTH} bytes: {part!r}"
            )
        if "\x00" in part:
            raise MalformedIdentifierError(f"NUL byte in identifier {full_name!r}")

    return TableIdentifier(schema=schema_name, table=table_name)


def quote_ident(name: str) -> str:
    """Double-quote an identifier, doubling any embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def quote_table(table: TableIdentifier) -> str:
    """Render a fully quoted `"schema"."table"` reference."""
    return f"{quote_ident(table.schema)}.{quote_ident(table.table)}"
