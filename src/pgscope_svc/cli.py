#!/usr/bin/env python3
"""
CLI tool for interacting with the pgscope service.

Usage:
    python -m pgscope_svc.cli counts --limit 20
    python -m pgscope_svc.cli tables
    python -m pgscope_svc.cli fks --refresh
    python -m pgscope_svc.cli details public customers
    python -m pgscope_svc.cli simulate customers --schema public
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx
from colorama import Fore, Style, init as colorama_init


COLOR_ENABLED = True

# Delete rules that remove or rewrite rows in the referencing table
DESTRUCTIVE_RULES = {"CASCADE", "SET NULL", "SET DEFAULT"}


def colorize(text: str, color: str) -> str:
    """Apply color if enabled."""
    if COLOR_ENABLED:
        return f"{color}{text}{Style.RESET_ALL}"
    return text


def print_json(data: Any, indent: int = 2) -> None:
    print(json.dumps(data, indent=indent, default=str))


def format_rule(rule: str | None) -> str:
    if not rule:
        return ""
    color = Fore.RED if rule in DESTRUCTIVE_RULES else Fore.YELLOW
    return colorize(f"[{rule}]", color)


def format_impact_tree(data: dict) -> list[str]:
    """Render a simulate-truncate response as indented lines."""
    lines = []
    for node in data.get("affectedTables", []):
        indent = "  " * node["level"]
        if node["level"] == 0:
            lines.append(f"{colorize(node['table'], Style.BRIGHT)} {colorize('(' + node['reason'] + ')', Style.DIM)}")
            continue
        rule = format_rule(node.get("delete_rule"))
        lines.append(f"{indent}└─ {colorize(node['table'], Fore.CYAN)} {rule} {colorize(node['reason'], Style.DIM)}")
    return lines


def format_suppressed(data: dict) -> list[str]:
    """Render suppressed edges (self-references, cycles, second paths)."""
    lines = []
    for edge in data.get("suppressedEdges", []):
        marker = "self" if edge["referencing_table"] == edge["referenced_table"] else "seen"
        lines.append(
            f"  {colorize(marker, Style.DIM)} {edge['referencing_table']}.{edge['referencing_column']}"
            f" -> {edge['referenced_table']} {format_rule(edge.get('delete_rule'))}"
        )
    return lines


def _client(args) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=args.base_url,
        timeout=args.timeout,
        transport=getattr(args, "transport", None),
    )


async def _request(args, method: str, path: str, **kwargs) -> Any | None:
    """Call the service; print the error and return None on failure."""
    async with _client(args) as client:
        response = await client.request(method, path, **kwargs)

    if response.status_code != 200:
        print(colorize(f"Error: {response.status_code}", Fore.RED), file=sys.stderr)
        print(response.text, file=sys.stderr)
        return None
    return response.json()


async def cmd_counts(args):
    """Row counts per table."""
    params = {"refresh": "true"} if args.refresh else {}
    data = await _request(args, "GET", "/api/table-counts", params=params)
    if data is None:
        return 1

    rows = data[: args.limit] if args.limit else data
    if args.json:
        print_json(rows)
        return 0

    width = max((len(f"{r['schemaname']}.{r['tablename']}") for r in rows), default=0)
    print(colorize(f"\n{len(data)} tables", Style.BRIGHT))
    for r in rows:
        name = f"{r['schemaname']}.{r['tablename']}"
        count = format(r["row_count"], ">12,")
        print(f"  {name.ljust(width)}  {colorize(count, Fore.GREEN)}")
    return 0


async def cmd_tables(args):
    """Cached table list."""
    data = await _request(args, "GET", "/api/tables-list")
    if data is None:
        return 1

    if args.json:
        print_json(data)
        return 0

    if not data:
        print(colorize("No cached table list. Run `counts` first.", Style.DIM))
        return 0
    for entry in data:
        print(f"  {entry['fullName']}")
    return 0


async def cmd_fks(args):
    """Foreign key constraints."""
    params = {"refresh": "true"} if args.refresh else {}
    data = await _request(args, "GET", "/api/foreign-keys", params=params)
    if data is None:
        return 1

    if args.json:
        print_json(data)
        return 0

    for fk in data:
        print(
            f"  {fk['table_schema']}.{fk['table_name']}.{fk['column_name']}"
            f" -> {fk['foreign_table_schema']}.{fk['foreign_table_name']}.{fk['foreign_column_name']}"
            f" {format_rule(fk['delete_rule'])} {colorize(fk['constraint_name'], Style.DIM)}"
        )
    return 0


async def cmd_details(args):
    """Row count and columns of one table."""
    data = await _request(args, "GET", f"/api/table-details/{args.schema}/{args.table}")
    if data is None:
        return 1

    if args.json:
        print_json(data)
        return 0

    print(colorize(f"\n{args.schema}.{args.table}", Style.BRIGHT), f"({data['count']} rows)")
    for col in data["columns"]:
        nullable = "" if col["is_nullable"] == "YES" else colorize(" NOT NULL", Style.DIM)
        print(f"  {col['column_name']} {colorize(col['data_type'], Fore.CYAN)}{nullable}")
    return 0


async def cmd_simulate(args):
    """Simulate a truncate and print the affected tables."""
    body = {"tableName": args.table}
    if args.schema:
        body["schemaName"] = args.schema

    data = await _request(args, "POST", "/api/simulate-truncate", json=body)
    if data is None:
        return 1

    if args.json:
        print_json(data)
        return 0

    affected = len(data.get("affectedTables", [])) - 1
    print(colorize(f"\nTruncate would reach {affected} other table(s):", Style.BRIGHT))
    for line in format_impact_tree(data):
        print(f"  {line}")

    suppressed = format_suppressed(data)
    if suppressed:
        print(colorize("\nAlready-reported references:", Style.BRIGHT))
        for line in suppressed:
            print(line)
    return 0


COMMANDS = {
    "counts": cmd_counts,
    "tables": cmd_tables,
    "fks": cmd_fks,
    "details": cmd_details,
    "simulate": cmd_simulate,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CLI tool for the pgscope service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--base-url",
        default="http://localhost:3000",
        help="Base URL of the pgscope service",
    )
    parser.add_argument("--timeout", type=float, default=120.0, help="Request timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Print raw JSON")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    counts_parser = subparsers.add_parser("counts", help="Row counts per table")
    counts_parser.add_argument("--refresh", action="store_true", help="Bypass the cache")
    counts_parser.add_argument("--limit", type=int, default=0, help="Show only the N largest tables")

    subparsers.add_parser("tables", help="Cached table list")

    fks_parser = subparsers.add_parser("fks", help="Foreign key constraints")
    fks_parser.add_argument("--refresh", action="store_true", help="Bypass the cache")

    details_parser = subparsers.add_parser("details", help="Row count and columns of a table")
    details_parser.add_argument("schema", help="Schema name")
    details_parser.add_argument("table", help="Table name")

    sim_parser = subparsers.add_parser("simulate", help="Simulate truncating a table")
    sim_parser.add_argument("table", help="Table name (optionally schema.table)")
    sim_parser.add_argument("--schema", help="Schema name (defaults to public)")

    return parser


def main(argv: list[str] | None = None):
    global COLOR_ENABLED

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.no_color:
        COLOR_ENABLED = False
    else:
        colorama_init()

    return asyncio.run(COMMANDS[args.command](args))


if __name__ == "__main__":
    sys.exit(main() or 0)
