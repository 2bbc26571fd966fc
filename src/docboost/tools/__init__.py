"""Tools exposed over MCP."""

from __future__ import annotations

from docboost.mcp_base import ToolRegistry
from docboost.schema import SchemaInspector
from docboost.search import SearchService
from docboost.tools.get_database_schema import GetDatabaseSchema
from docboost.tools.search_documentation import SearchDocumentation

__all__ = ["GetDatabaseSchema", "SearchDocumentation", "build_registry"]


def build_registry(search: SearchService, inspector: SchemaInspector) -> ToolRegistry:
    """Assemble the registry the server advertises in ``tools/list``."""
    return ToolRegistry([
        SearchDocumentation(search),
        GetDatabaseSchema(inspector),
    ])
