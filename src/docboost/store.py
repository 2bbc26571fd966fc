"""
Document store: SQLite metadata table plus an FTS5 full-text table.

Both relations are keyed by document URL and are only ever written together
inside one transaction, so a metadata row never exists without its
full-text row (or the reverse). The FTS5 table uses the Porter stemmer on
top of ``unicode61`` so "saving", "saved" and "saves" all match "save".
WAL mode is enabled for file databases so readers are not blocked while the
indexer writes.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Collection, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Final

from docboost.errors import Result, SearchError, StoreError
from docboost.models import Document, IndexStats, SearchResult, TypeCount

# ─── Constants ────────────────────────────────────────────────────────────────

MEMORY_PATH: Final[str] = ":memory:"
HIGHLIGHT_OPEN: Final[str] = "<mark>"
HIGHLIGHT_CLOSE: Final[str] = "</mark>"
ELLIPSIS: Final[str] = "..."
SNIPPET_TOKENS: Final[int] = 60

# Column index of ``content`` inside documentation_fts, used by snippet().
_CONTENT_COLUMN: Final[int] = 1

_SNIPPET_SQL: Final[str] = (
    f"snippet(documentation_fts, {_CONTENT_COLUMN}, '{HIGHLIGHT_OPEN}', "
    f"'{HIGHLIGHT_CLOSE}', '{ELLIPSIS}', {SNIPPET_TOKENS})"
)

# sqlite3.OperationalError messages caused by the MATCH expression itself
_EXPRESSION_ERRORS: Final[tuple[str, ...]] = (
    "fts5",
    "syntax error",
    "no such column",
    "unterminated string",
    "unknown special query",
)

_logger = logging.getLogger("docboost.store")

_SCHEMA: Final[str] = """
CREATE TABLE IF NOT EXISTS documentation_meta (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    url         TEXT    NOT NULL UNIQUE,
    title       TEXT    NOT NULL,
    type        TEXT    NOT NULL,
    category    TEXT,
    source      TEXT,
    indexed_at  TEXT    NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_documentation_meta_type ON documentation_meta(type);

CREATE VIRTUAL TABLE IF NOT EXISTS documentation_fts USING fts5(
    title,
    content,
    url UNINDEXED,
    type UNINDEXED,
    category UNINDEXED,
    tokenize = 'porter unicode61'
);
"""


class DocumentStore:
    """
    Owns the single connection to the on-disk index.

    Construct once per process and pass it to the services that need it.
    Every operation returns a ``Result``; SQLite exceptions never leave this
    class. The constructor raises ``StoreError`` if the index cannot be
    opened.
    """

    def __init__(self, path: str | Path = MEMORY_PATH) -> None:
        self.path = str(path)
        if self.path != MEMORY_PATH:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        try:
            # Autocommit mode; transactions are opened explicitly in _transaction().
            conn = sqlite3.connect(self.path, isolation_level=None)
            conn.row_factory = sqlite3.Row
            if self.path != MEMORY_PATH:
                conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open documentation index {self.path}: {e}") from e
        self._conn = conn
        _logger.debug("Opened documentation index at %s", self.path)

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> DocumentStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        self._conn.execute("BEGIN")
        try:
            yield self._conn
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    # ─── Writes ──────────────────────────────────────────────────────────────

    def upsert(self, document: Document) -> Result[None]:
        """Insert or replace *document* in both relations atomically."""
        try:
            with self._transaction() as db:
                db.execute(
                    """
                    INSERT INTO documentation_meta (url, title, type, category, source, indexed_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(url) DO UPDATE SET
                        title = excluded.title,
                        type = excluded.type,
                        category = excluded.category,
                        source = excluded.source,
                        indexed_at = excluded.indexed_at
                    """,
                    (
                        document.url,
                        document.title,
                        document.type,
                        document.category,
                        document.source,
                        document.indexed_at.isoformat(),
                    ),
                )
                db.execute("DELETE FROM documentation_fts WHERE url = ?", (document.url,))
                db.execute(
                    "INSERT INTO documentation_fts (title, content, url, type, category) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        document.title,
                        document.body,
                        document.url,
                        document.type,
                        document.category,
                    ),
                )
        except sqlite3.Error as e:
            _logger.warning("Failed to add document %s: %s", document.url, e)
            return Result.failure(StoreError(f"Failed to add document {document.url}: {e}"))
        return Result.success()

    def clear(self) -> Result[None]:
        """Remove every document from both relations."""
        try:
            with self._transaction() as db:
                db.execute("DELETE FROM documentation_fts")
                db.execute("DELETE FROM documentation_meta")
        except sqlite3.Error as e:
            return Result.failure(StoreError(f"Failed to clear index: {e}"))
        _logger.info("Cleared documentation index %s", self.path)
        return Result.success()

    # ─── Reads ───────────────────────────────────────────────────────────────

    def stats(self) -> Result[IndexStats]:
        """Total document count and a per-type breakdown ordered by type."""
        try:
            total = self._conn.execute(
                "SELECT COUNT(*) AS total FROM documentation_meta"
            ).fetchone()["total"]
            rows = self._conn.execute(
                """
                SELECT type, COUNT(*) AS count
                FROM documentation_meta
                GROUP BY type
                ORDER BY type
                """
            ).fetchall()
        except sqlite3.Error as e:
            return Result.failure(StoreError(f"Failed to read index statistics: {e}"))

        return Result.success(IndexStats(
            total=total,
            by_type=[TypeCount(type=row["type"], count=row["count"]) for row in rows],
            db_path=self.path,
        ))

    def get(self, url: str) -> Result[Document | None]:
        """Load the document stored under *url*, or ``None``."""
        try:
            row = self._conn.execute(
                """
                SELECT m.url, m.title, m.type, m.category, m.source, m.indexed_at,
                       f.content AS body
                FROM documentation_meta m
                JOIN documentation_fts f ON f.url = m.url
                WHERE m.url = ?
                """,
                (url,),
            ).fetchone()
        except sqlite3.Error as e:
            return Result.failure(StoreError(f"Failed to load document {url}: {e}"))

        if row is None:
            return Result.success(None)
        return Result.success(Document(
            url=row["url"],
            title=row["title"],
            body=row["body"],
            type=row["type"],
            category=row["category"],
            source=row["source"],
            indexed_at=datetime.fromisoformat(row["indexed_at"]),
        ))

    def count_rows(self, url: str) -> tuple[int, int]:
        """Return ``(metadata_rows, fulltext_rows)`` stored for *url*."""
        meta = self._conn.execute(
            "SELECT COUNT(*) FROM documentation_meta WHERE url = ?", (url,)
        ).fetchone()[0]
        fts = self._conn.execute(
            "SELECT COUNT(*) FROM documentation_fts WHERE url = ?", (url,)
        ).fetchone()[0]
        return meta, fts

    def query(
        self,
        expression: str,
        limit: int,
        types: Collection[str] = (),
        categories: Collection[str] = (),
    ) -> Result[list[SearchResult]]:
        """
        Run a compiled FTS5 *expression* with optional type/category filters.

        Hits are ordered by FTS5 ``rank`` (BM25, lower is better), then by
        URL so that equal scores always come back in the same order.
        """
        sql = f"""
            SELECT
                title,
                url,
                type,
                category,
                {_SNIPPET_SQL} AS snippet,
                rank AS relevance
            FROM documentation_fts
            WHERE documentation_fts MATCH ?
        """
        params: list[object] = [expression]

        if types:
            sql += f" AND type IN ({_placeholders(len(types))})"
            params.extend(sorted(types))

        if categories:
            sql += f" AND category IN ({_placeholders(len(categories))})"
            params.extend(sorted(categories))

        sql += " ORDER BY rank, url LIMIT ?"
        params.append(limit)

        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.OperationalError as e:
            if any(marker in str(e).lower() for marker in _EXPRESSION_ERRORS):
                return Result.failure(SearchError(f"Invalid search expression {expression!r}: {e}"))
            return Result.failure(StoreError(f"Search failed: {e}"))
        except sqlite3.Error as e:
            return Result.failure(StoreError(f"Search failed: {e}"))

        return Result.success([
            SearchResult(
                title=row["title"],
                url=row["url"],
                type=row["type"],
                category=row["category"],
                snippet=row["snippet"] or "",
                relevance=row["relevance"],
            )
            for row in rows
        ])


def _placeholders(count: int) -> str:
    return ", ".join("?" * count)
