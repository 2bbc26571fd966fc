"""
get_database_schema — Describe tables on a configured database connection.

Returns columns, primary key, indexes and constraints for one table, or for
every table when no table is named.

Read-only.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from docboost.config import DEFAULT_CONNECTION
from docboost.errors import Result
from docboost.mcp_base import MCPTool
from docboost.schema import SchemaInspector, SchemaReport


class Params(BaseModel):
    """Parameters for get_database_schema."""

    table: str | None = Field(
        default=None,
        description="Specific table name (omit for all tables)",
    )
    connection: str = Field(
        default=DEFAULT_CONNECTION,
        description=f'Database connection name (default: "{DEFAULT_CONNECTION}")',
    )


class GetDatabaseSchema(MCPTool[Params, SchemaReport]):
    """Get database schema information for tables."""

    name = "get_database_schema"
    description = "Get database schema information for tables"

    def __init__(self, inspector: SchemaInspector) -> None:
        self.inspector = inspector

    def execute(self, params: Params) -> Result[SchemaReport]:
        return self.inspector.describe(params.table, params.connection)
