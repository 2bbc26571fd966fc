"""
search_documentation — Full-text search across the documentation index.

Compiles the query into an FTS5 expression, optionally restricts hits to one
category, and returns them best first with highlighted snippets.

Read-only.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from docboost.errors import Result, ValidationError
from docboost.mcp_base import MCPTool
from docboost.models import SearchResult
from docboost.search import DEFAULT_LIMIT, SearchService

MAX_LIMIT: int = 100

# ─── Params / Payload ────────────────────────────────────────────────────────


class Params(BaseModel):
    """Parameters for search_documentation."""

    query: str = Field(
        description='Search query (e.g. "how to save data", "belongsToMany")',
    )
    limit: int = Field(
        default=DEFAULT_LIMIT,
        ge=1,
        le=MAX_LIMIT,
        description=f"Maximum number of results (default: {DEFAULT_LIMIT})",
    )
    category: str | None = Field(
        default=None,
        description="Filter by category (orm, controller, validation, etc.)",
    )


class Payload(BaseModel):
    """Return value for search_documentation."""

    query: str
    total_results: int
    results: list[SearchResult]


# ─── Tool ─────────────────────────────────────────────────────────────────────


class SearchDocumentation(MCPTool[Params, Payload]):
    """Search the documentation with natural language queries."""

    name = "search_documentation"
    description = "Search the indexed documentation with natural language queries"

    def __init__(self, search: SearchService) -> None:
        self.search = search

    def execute(self, params: Params) -> Result[Payload]:
        if not params.query:
            return Result.failure(ValidationError("Query parameter is required"))

        categories = [params.category] if params.category else []
        found = self.search.search(params.query, params.limit, (), categories)
        if not found.ok:
            return Result.failure(found.error)  # type: ignore[arg-type]

        results = found.unwrap()
        return Result.success(Payload(
            query=params.query,
            total_results=len(results),
            results=results,
        ))
