"""
Shared fixtures for doc-boost tests.

Provides an in-memory document store (empty and seeded), the services built
on top of it, a temporary SQLite database for schema introspection, and an
MCP server wired to all of them.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from docboost.indexer import index_source
from docboost.mcp_base import MCPServer
from docboost.models import Document
from docboost.schema import SchemaInspector
from docboost.search import SearchService
from docboost.sources import BookSource
from docboost.store import DocumentStore
from docboost.tools import build_registry


@pytest.fixture()
def store() -> Iterator[DocumentStore]:
    """A fresh in-memory store, closed after the test."""
    s = DocumentStore()
    yield s
    s.close()


@pytest.fixture()
def seeded_store(store: DocumentStore) -> DocumentStore:
    """
    Store holding the bundled book pages plus two API pages.

    The API pages share a category with the book's ORM pages so filter
    tests can tell type and category restrictions apart.
    """
    index_source(store, BookSource())
    store.upsert(Document(
        url="https://api.cakephp.org/5/class-Cake.ORM.Table.html",
        title="Cake\\ORM\\Table",
        body="Table::save() persists an entity. Table::saveMany() saves a list of entities.",
        type="api",
        category="orm",
        source="api",
    )).unwrap()
    store.upsert(Document(
        url="https://api.cakephp.org/5/class-Cake.Http.ServerRequest.html",
        title="Cake\\Http\\ServerRequest",
        body="ServerRequest::getData() reads posted data from the request body.",
        type="api",
        category="http",
        source="api",
    )).unwrap()
    return store


@pytest.fixture()
def search_service(seeded_store: DocumentStore) -> SearchService:
    return SearchService(seeded_store)


@pytest.fixture()
def schema_db(tmp_path: Path) -> Path:
    """
    A small SQLite database to introspect.

    Tables:
        authors  (id PK autoincrement, name, email)
        articles (id PK, author_id -> authors.id, title, published)
    """
    path = tmp_path / "app.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE authors (
            id     INTEGER PRIMARY KEY AUTOINCREMENT,
            name   TEXT NOT NULL,
            email  TEXT
        );

        CREATE TABLE articles (
            id         INTEGER PRIMARY KEY,
            author_id  INTEGER NOT NULL REFERENCES authors(id) ON DELETE CASCADE,
            title      TEXT NOT NULL,
            published  INTEGER DEFAULT 0
        );

        CREATE INDEX idx_articles_title ON articles(title);
        """
    )
    conn.commit()
    conn.close()
    return path


@pytest.fixture()
def inspector(schema_db: Path) -> Iterator[SchemaInspector]:
    i = SchemaInspector({"default": f"sqlite:///{schema_db}"})
    yield i
    i.close()


@pytest.fixture()
def server(search_service: SearchService, inspector: SchemaInspector) -> MCPServer:
    registry = build_registry(search_service, inspector)
    return MCPServer(name="doc-boost", version="1.0.0", registry=registry)
