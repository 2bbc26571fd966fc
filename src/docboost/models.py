"""
Shared Pydantic models for doc-boost.

- Document — one indexed unit of documentation
- SearchQuery, SearchResult — search request and hit
- TypeCount, IndexStats — aggregate counts over the index
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─── Index Types ─────────────────────────────────────────────────────────────


class Document(BaseModel):
    """A documentation page, keyed by its URL."""

    url: str = Field(min_length=1, description="Unique document URL")
    title: str = Field(description="Document title")
    body: str = Field(description="Full text of the document")
    type: str = Field(description="book | api | guide | example")
    category: str | None = Field(default=None, description="Topic, e.g. orm or controller")
    source: str | None = Field(default=None, description="Provenance tag, e.g. cakephp-5.x")
    indexed_at: datetime = Field(default_factory=_utcnow)


class TypeCount(BaseModel):
    """Number of documents of one type."""

    type: str
    count: int


class IndexStats(BaseModel):
    """Aggregate counts over the metadata relation."""

    total: int
    by_type: list[TypeCount] = Field(default_factory=list)
    db_path: str = ""


# ─── Search Types ────────────────────────────────────────────────────────────


class SearchQuery(BaseModel):
    """A search request."""

    query: str
    limit: int = Field(default=10, ge=1)
    types: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()


class SearchResult(BaseModel):
    """A single search hit."""

    title: str
    url: str
    type: str
    category: str | None = None
    snippet: str = ""
    relevance: float = Field(description="FTS5 rank; lower is more relevant")
