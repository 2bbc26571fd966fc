"""
doc-boost command line.

Usage:
    docboost index [--clear] [--source {book,api,all}]
    docboost search <query> [--limit N] [--type T] [--category C]
    docboost schema [table] [--connection NAME] [--format {table,json}]
    docboost serve

Global options ``--db PATH`` (index location) and ``-v`` (debug logging)
come before the command name.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from collections.abc import Sequence
from pathlib import Path

from docboost import __version__
from docboost.config import DEFAULT_CONNECTION, Settings, configure_logging, load_settings
from docboost.errors import DocsError
from docboost.indexer import IndexReport, index_source
from docboost.mcp_base import MCPServer
from docboost.schema import SchemaInspector, SchemaReport
from docboost.search import DEFAULT_LIMIT, SearchService
from docboost.sources import BookSource, DirectorySource
from docboost.store import DocumentStore
from docboost.tools import build_registry

SERVER_NAME = "doc-boost"

_TAG = re.compile(r"</?mark>")

_logger = logging.getLogger("docboost.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docboost",
        description="Index and search technical documentation; serve it over MCP.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", type=Path, default=None, help="Path of the index database")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    index = commands.add_parser("index", help="Index documentation for searching")
    index.add_argument("-c", "--clear", action="store_true", help="Clear existing index first")
    index.add_argument(
        "-s", "--source", choices=["book", "api", "all"], default="all",
        help="Source to index (default: all)",
    )

    search = commands.add_parser("search", help="Search the documentation")
    search.add_argument("query", nargs="+", help="Search query")
    search.add_argument("-l", "--limit", type=int, default=DEFAULT_LIMIT, help="Maximum number of results")
    search.add_argument("-t", "--type", default=None, help="Filter by type (api, book, guide, example)")
    search.add_argument("-c", "--category", default=None, help="Filter by category")

    schema = commands.add_parser("schema", help="Display database schema information")
    schema.add_argument("table", nargs="?", default=None, help="Specific table name")
    schema.add_argument("-c", "--connection", default=DEFAULT_CONNECTION, help="Connection to use")
    schema.add_argument("-f", "--format", choices=["table", "json"], default="table", help="Output format")

    commands.add_parser("serve", help="Run the MCP server on stdin/stdout")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    db_path = args.db or settings.index_path
    handlers = {
        "index": _cmd_index,
        "search": _cmd_search,
        "schema": _cmd_schema,
        "serve": _cmd_serve,
    }
    try:
        return handlers[args.command](args, settings, db_path)
    except DocsError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


# ─── Commands ────────────────────────────────────────────────────────────────


def _cmd_index(args: argparse.Namespace, settings: Settings, db_path: Path) -> int:
    with DocumentStore(db_path) as store:
        if args.clear:
            print("Clearing existing index...")
            store.clear().unwrap()

        print("Starting documentation indexing...")
        print()
        report = IndexReport()

        if args.source in ("book", "all"):
            print("Indexing documentation book...")
            report.merge(index_source(store, BookSource()))

        if args.source in ("api", "all"):
            if settings.api_docs_dir is None:
                print("Warning: DOCBOOST_API_DOCS_DIR is not set; skipping API documentation")
            else:
                print(f"Indexing API documentation from {settings.api_docs_dir}...")
                source = DirectorySource(settings.api_docs_dir, doc_type="api", source="api")
                report.merge(index_source(store, source))

        print()
        print(f"Indexing complete! Indexed: {report.indexed}, Errors: {report.errors}")

        stats = store.stats().unwrap()
        print()
        print("Database Statistics:")
        print(f"  Total documents: {stats.total}")
        print("  By type:")
        for row in stats.by_type:
            print(f"    - {row.type}: {row.count}")
    return 0


def _cmd_search(args: argparse.Namespace, settings: Settings, db_path: Path) -> int:
    query = " ".join(args.query)
    types = [args.type] if args.type else []
    categories = [args.category] if args.category else []

    with DocumentStore(db_path) as store:
        print(f"Searching for: {query}")
        print()
        results = SearchService(store).search(query, args.limit, types, categories).unwrap()

    if not results:
        print("No results found.")
        return 0

    print(f"Found {len(results)} results:")
    print()
    for i, hit in enumerate(results, start=1):
        print(f"{i}. {hit.title} [{hit.type}]")
        if hit.category:
            print(f"   Category: {hit.category}")
        print(f"   URL: {hit.url}")
        if hit.snippet:
            print(f"   {_TAG.sub('', hit.snippet)}")
        print()
    return 0


def _cmd_schema(args: argparse.Namespace, settings: Settings, db_path: Path) -> int:
    inspector = SchemaInspector(settings.connections)
    try:
        report = inspector.describe(args.table, args.connection).unwrap()
    finally:
        inspector.close()

    if args.format == "json":
        print(json.dumps(report.model_dump(mode="json")["tables"], indent=4))
        return 0

    _print_schema(report, detailed=args.table is not None)
    return 0


def _cmd_serve(args: argparse.Namespace, settings: Settings, db_path: Path) -> int:
    inspector = SchemaInspector(settings.connections)
    with DocumentStore(db_path) as store:
        registry = build_registry(SearchService(store), inspector)
        server = MCPServer(name=SERVER_NAME, version=__version__, registry=registry)
        try:
            server.start()
        finally:
            inspector.close()
    return 0


# ─── Output ──────────────────────────────────────────────────────────────────


def _print_schema(report: SchemaReport, detailed: bool) -> None:
    if not report.tables:
        print("Warning: No tables found in database")
        return

    for name, table in report.tables.items():
        print()
        print(f"Table: {name}")
        print("=" * 80)

        if not detailed:
            print(f"Columns: {len(table.columns)}")
            if table.primaryKey:
                print(f"Primary Key: {', '.join(table.primaryKey)}")
            fields = ", ".join(f"{col} ({info['type']})" for col, info in table.columns.items())
            print(f"Fields: {fields}")
            continue

        print()
        print("Columns:")
        for col, info in table.columns.items():
            print()
            print(f"  {col}")
            print(f"    Type: {info['type']}")
            print(f"    Null: {'YES' if info['null'] else 'NO'}")
            print(f"    Default: {info['default'] if info['default'] is not None else 'NULL'}")
            if info.get("autoIncrement"):
                print("    Auto Increment: YES")

        if table.primaryKey:
            print()
            print("Primary Key:")
            print(f"  {', '.join(table.primaryKey)}")

        if table.indexes:
            print()
            print("Indexes:")
            for index_name, index in table.indexes.items():
                print(f"  {index_name}: {', '.join(index['columns'])}")

        foreign = {k: v for k, v in table.constraints.items() if v["type"] == "foreign"}
        if foreign:
            print()
            print("Foreign Keys:")
            for fk_name, fk in foreign.items():
                ref_table, ref_columns = fk["references"]
                print(f"  {fk_name}: {', '.join(fk['columns'])} -> {ref_table}({', '.join(ref_columns)})")

    print()
    print(f"Total tables: {len(report.tables)}")
