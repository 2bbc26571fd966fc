"""Documentation feeds that produce ``Document`` records for the indexer."""

from __future__ import annotations

from docboost.sources.book import BookSource
from docboost.sources.files import DirectorySource

__all__ = ["BookSource", "DirectorySource"]
