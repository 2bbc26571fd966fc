"""
Database schema introspection for ``get_database_schema`` and ``docboost schema``.

Connections are named SQLAlchemy URLs taken from ``Settings.connections``.
Engines are created on first use and reused until ``close()``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.engine.reflection import Inspector
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError

from docboost.config import DEFAULT_CONNECTION
from docboost.errors import Result, StoreError, ValidationError

_logger = logging.getLogger("docboost.schema")


class TableSchema(BaseModel):
    """Columns, primary key, indexes and constraints of one table."""

    columns: dict[str, dict[str, Any]] = Field(default_factory=dict)
    primaryKey: list[str] = Field(default_factory=list)  # noqa: N815
    indexes: dict[str, dict[str, Any]] = Field(default_factory=dict)
    constraints: dict[str, dict[str, Any]] = Field(default_factory=dict)


class SchemaReport(BaseModel):
    """Schema of the requested tables on one connection."""

    connection: str
    tables: dict[str, TableSchema] = Field(default_factory=dict)


class SchemaInspector:
    """Describes tables reachable through named SQLAlchemy connections."""

    def __init__(self, connections: Mapping[str, str]) -> None:
        self._urls = dict(connections)
        self._engines: dict[str, Engine] = {}

    @property
    def connection_names(self) -> list[str]:
        return sorted(self._urls)

    def close(self) -> None:
        for engine in self._engines.values():
            engine.dispose()
        self._engines.clear()

    def _engine(self, name: str) -> Result[Engine]:
        if name in self._engines:
            return Result.success(self._engines[name])

        url = self._urls.get(name)
        if url is None:
            configured = ", ".join(self.connection_names) or "none"
            return Result.failure(ValidationError(
                f"Unknown connection: {name} (configured: {configured})"
            ))

        try:
            engine = create_engine(url)
        except (ArgumentError, NoSuchModuleError, ImportError) as e:
            return Result.failure(StoreError(f"Invalid URL for connection {name}: {e}"))

        self._engines[name] = engine
        return Result.success(engine)

    def describe(
        self, table: str | None = None, connection: str = DEFAULT_CONNECTION
    ) -> Result[SchemaReport]:
        """Describe *table*, or every table when *table* is ``None``."""
        engine_result = self._engine(connection)
        if not engine_result.ok:
            return Result.failure(engine_result.error)  # type: ignore[arg-type]

        try:
            inspector = inspect(engine_result.unwrap())
            if table:
                if not inspector.has_table(table):
                    return Result.failure(ValidationError(
                        f"Table not found on connection {connection}: {table}"
                    ))
                names = [table]
            else:
                names = inspector.get_table_names()

            tables = {name: _describe_table(inspector, name) for name in names}
        except SQLAlchemyError as e:
            _logger.warning("Schema introspection failed on %s: %s", connection, e)
            return Result.failure(StoreError(f"Schema introspection failed on {connection}: {e}"))

        return Result.success(SchemaReport(connection=connection, tables=tables))


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _describe_table(inspector: Inspector, table: str) -> TableSchema:
    pk = inspector.get_pk_constraint(table)
    pk_columns = list(pk.get("constrained_columns") or [])

    columns: dict[str, dict[str, Any]] = {}
    for column in inspector.get_columns(table):
        autoincrement = column.get("autoincrement")
        columns[column["name"]] = {
            "type": str(column["type"]),
            "null": bool(column.get("nullable", True)),
            "default": column.get("default"),
            "primary": column["name"] in pk_columns,
            "autoIncrement": autoincrement is True,
        }

    indexes = {
        index["name"]: {
            "type": "unique" if index.get("unique") else "index",
            "columns": [c for c in index.get("column_names", []) if c is not None],
        }
        for index in inspector.get_indexes(table)
        if index.get("name")
    }

    constraints: dict[str, dict[str, Any]] = {}
    if pk_columns:
        constraints[pk.get("name") or "primary"] = {"type": "primary", "columns": pk_columns}
    for unique in inspector.get_unique_constraints(table):
        name = unique.get("name") or f"{table}_{'_'.join(unique['column_names'])}_unique"
        constraints[name] = {"type": "unique", "columns": list(unique["column_names"])}
    for fk in inspector.get_foreign_keys(table):
        name = fk.get("name") or f"{table}_{'_'.join(fk['constrained_columns'])}_fk"
        constraints[name] = {
            "type": "foreign",
            "columns": list(fk["constrained_columns"]),
            "references": [fk["referred_table"], list(fk["referred_columns"])],
            "update": (fk.get("options") or {}).get("onupdate"),
            "delete": (fk.get("options") or {}).get("ondelete"),
        }

    return TableSchema(
        columns=columns,
        primaryKey=pk_columns,
        indexes=indexes,
        constraints=constraints,
    )
