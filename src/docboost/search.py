"""
Search service: compile the user's query, filter, rank and snippet.

Composes the query compiler with ``DocumentStore.query``. Ranking and
snippet extraction are done by SQLite's FTS5 engine; see ``store.py`` for
the exact ordering and highlight markers.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

from docboost.errors import Result, SearchError
from docboost.models import SearchQuery, SearchResult
from docboost.query import compile_query
from docboost.store import DocumentStore

DEFAULT_LIMIT: int = 10

_logger = logging.getLogger("docboost.search")


class SearchService:
    """Answers filtered, ranked, snippeted queries against one store."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def search(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
        types: Collection[str] = (),
        categories: Collection[str] = (),
    ) -> Result[list[SearchResult]]:
        """Return at most *limit* hits for *query*, best first."""
        if limit < 1:
            return Result.failure(SearchError(f"Limit must be a positive integer, got {limit}"))

        compiled = compile_query(query)
        if not compiled.ok:
            return Result.failure(compiled.error)  # type: ignore[arg-type]

        expression = compiled.unwrap()
        _logger.debug(
            "search %r -> %r (limit=%d types=%s categories=%s)",
            query, expression, limit, sorted(types), sorted(categories),
        )
        return self.store.query(expression, limit, types, categories)

    def search_query(self, request: SearchQuery) -> Result[list[SearchResult]]:
        return self.search(request.query, request.limit, request.types, request.categories)
