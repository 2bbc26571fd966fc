"""
Directory feed: index documentation files found on disk.

Every matching file becomes one document: the title is the first markdown
or reStructuredText heading (falling back to the file name), the category is
the name of the directory that holds the file, and the URL is the file's
``file://`` URI.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Final

from docboost.models import Document

DEFAULT_FILE_TYPES: Final[frozenset[str]] = frozenset({".md", ".markdown", ".rst", ".txt"})

_MD_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
_RST_UNDERLINE = re.compile(r"^([=\-~^\"'`#*+])\1{2,}\s*$")

_logger = logging.getLogger("docboost.sources.files")


class DirectorySource:
    """Yields one document per text file under *root*."""

    name = "files"

    def __init__(
        self,
        root: Path,
        doc_type: str = "guide",
        source: str | None = None,
        file_types: frozenset[str] = DEFAULT_FILE_TYPES,
        recursive: bool = True,
    ) -> None:
        self.root = Path(root)
        self.doc_type = doc_type
        self.source = source or self.root.name
        self.file_types = frozenset(e.lower() for e in file_types)
        self.recursive = recursive

    def documents(self) -> Iterator[Document]:
        if not self.root.is_dir():
            raise FileNotFoundError(f"Directory not found: {self.root}")

        for path in _collect_files(self.root, self.file_types, self.recursive):
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                _logger.warning("Skipping unreadable file %s: %s", path, e)
                continue

            category = None if path.parent == self.root else path.parent.name
            yield Document(
                url=path.resolve().as_uri(),
                title=extract_title(text) or path.stem,
                body=text,
                type=self.doc_type,
                category=category,
                source=self.source,
            )


def _collect_files(folder: Path, extensions: frozenset[str], recursive: bool) -> list[Path]:
    """Return all files under *folder* whose suffix is in *extensions*."""
    pattern = "**/*" if recursive else "*"
    return sorted(
        p for p in folder.glob(pattern)
        if p.is_file() and p.suffix.lower() in extensions
    )


def extract_title(text: str) -> str | None:
    """Return the first markdown ``#`` heading or underlined rst heading."""
    lines = text.splitlines()
    for i, line in enumerate(lines):
        match = _MD_HEADING.match(line)
        if match:
            return match.group(1)
        if (
            i + 1 < len(lines)
            and line.strip()
            and _RST_UNDERLINE.match(lines[i + 1])
            and len(lines[i + 1].strip()) >= len(line.strip())
        ):
            return line.strip()
    return None
