"""
Bulk indexing: feed documentation sources into a ``DocumentStore``.

A document that fails to store is counted and logged; the batch carries on
with the next one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from docboost.errors import DocsError, StoreError
from docboost.models import Document
from docboost.store import DocumentStore

PROGRESS_EVERY: int = 10

_logger = logging.getLogger("docboost.indexer")


class DocumentSource(Protocol):
    name: str

    def documents(self) -> Iterable[Document]: ...


@dataclass
class IndexReport:
    """Outcome of indexing one or more sources."""

    indexed: int = 0
    errors: int = 0
    failures: list[DocsError] = field(default_factory=list)

    def merge(self, other: IndexReport) -> None:
        self.indexed += other.indexed
        self.errors += other.errors
        self.failures.extend(other.failures)


def index_documents(
    store: DocumentStore,
    documents: Iterable[Document],
    report: IndexReport | None = None,
) -> IndexReport:
    """Upsert every document, counting successes and failures into *report*."""
    report = IndexReport() if report is None else report
    for doc in documents:
        result = store.upsert(doc)
        if not result.ok:
            report.errors += 1
            report.failures.append(result.error)  # type: ignore[arg-type]
            _logger.warning("Error indexing %s: %s", doc.title, result.error)
            continue

        report.indexed += 1
        if report.indexed % PROGRESS_EVERY == 0:
            _logger.info("Indexed %d documents...", report.indexed)
    return report


def index_source(store: DocumentStore, source: DocumentSource) -> IndexReport:
    """
    Index everything *source* yields.

    A source that cannot be read at all counts as a single error.
    """
    _logger.info("Indexing source %s", source.name)
    report = IndexReport()
    try:
        index_documents(store, source.documents(), report)
    except (OSError, ValueError) as e:
        _logger.error("Failed to read source %s: %s", source.name, e)
        report.errors += 1
        report.failures.append(StoreError(f"Failed to read source {source.name}: {e}"))
    return report
