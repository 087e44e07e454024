"""Catalog queries against information_schema and pg_catalog.

Every query binds table names as parameters ($1, $2). The only statement
that needs an interpolated identifier is the row count, built by the
adapter from an allow-listed, quoted table reference.
"""

LIST_TABLES_SQL = """
    SELECT
      table_schema AS schemaname,
      table_name AS tablename
    FROM information_schema.tables
    WHERE table_schema NOT IN ('pg_catalog', 'information_schema')
      AND table_type = 'BASE TABLE'
    ORDER BY table_schema, table_name
"""

TABLE_EXISTS_SQL = """
    SELECT EXISTS (
      SELECT 1
      FROM information_schema.tables
      WHERE table_schema = $1
        AND table_name = $2
        AND table_type = 'BASE TABLE'
    )
"""

# Foreign keys are read from pg_constraint. Both ends are resolved by OID, so
# the referencing and referenced schemas are independent, and
# unnest(conkey, confkey) pairs composite key columns by position.
_FK_RULE_SQL = """
      CASE con.{column}
        WHEN 'c' THEN 'CASCADE'
        WHEN 'n' THEN 'SET NULL'
        WHEN 'd' THEN 'SET DEFAULT'
        WHEN 'r' THEN 'RESTRICT'
        ELSE 'NO ACTION'
      END"""

_FK_FROM_SQL = """
    FROM pg_catalog.pg_constraint AS con
    JOIN pg_catalog.pg_class AS src
      ON src.oid = con.conrelid
    JOIN pg_catalog.pg_namespace AS src_ns
      ON src_ns.oid = src.relnamespace
    JOIN pg_catalog.pg_class AS dst
      ON dst.oid = con.confrelid
    JOIN pg_catalog.pg_namespace AS dst_ns
      ON dst_ns.oid = dst.relnamespace
    CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
      WITH ORDINALITY AS cols(src_attnum, dst_attnum, ord)
    JOIN pg_catalog.pg_attribute AS src_col
      ON src_col.attrelid = con.conrelid
      AND src_col.attnum = cols.src_attnum
    JOIN pg_catalog.pg_attribute AS dst_col
      ON dst_col.attrelid = con.confrelid
      AND dst_col.attnum = cols.dst_attnum
    WHERE con.contype = 'f'
      AND src_ns.nspname NOT IN ('pg_catalog', 'information_schema')"""

LIST_FOREIGN_KEYS_SQL = f"""
    SELECT
      con.conname AS constraint_name,
      src_ns.nspname AS table_schema,
      src.relname AS table_name,
      src_col.attname AS column_name,
      dst_ns.nspname AS foreign_table_schema,
      dst.relname AS foreign_table_name,
      dst_col.attname AS foreign_column_name,{_FK_RULE_SQL.format(column="confdeltype")} AS delete_rule,{_FK_RULE_SQL.format(column="confupdtype")} AS update_rule
{_FK_FROM_SQL}
    ORDER BY table_schema, table_name, constraint_name, cols.ord
"""

# Edges whose referenced side is ($1, $2): "who points at me"
REFERENCING_EDGES_SQL = f"""
    SELECT
      con.conname AS constraint_name,
      src_ns.nspname AS referencing_schema,
      src.relname AS referencing_table,
      src_col.attname AS referencing_column,
      dst_col.attname AS referenced_column,{_FK_RULE_SQL.format(column="confdeltype")} AS delete_rule
{_FK_FROM_SQL}
      AND dst_ns.nspname = $1
      AND dst.relname = $2
    ORDER BY
      referencing_schema,
      referencing_table,
      referencing_column,
      constraint_name
"""

COLUMNS_SQL = """
    SELECT
      column_name,
      data_type,
      is_nullable
    FROM information_schema.columns
    WHERE table_schema = $1 AND table_name = $2
    ORDER BY ordinal_position
"""

COUNT_ROWS_SQL = "SELECT COUNT(*) AS count FROM {table}"
