"""
pgscope - PostgreSQL table inspection service

A read-only inspection service providing:
- Row counts for every table, cached as JSON snapshots
- Foreign key listing across schemas
- Truncate impact simulation: which tables a TRUNCATE reaches through
  foreign keys, at what depth, and through which constraint
"""

__version__ = "0.1.0"
