"""
Query compiler: free-form user text to an FTS5 MATCH expression.

Input containing a double quote is passed through untouched so callers can
write phrase queries. Everything else becomes an OR of prefix terms, one per
whitespace-separated token longer than two characters. Each term is wrapped
in an FTS5 string (``"save()"*``) so punctuation and operator words in the
user's text are matched literally instead of being parsed as syntax.
"""

from __future__ import annotations

from typing import Final

from docboost.errors import Result, SearchError

MIN_TERM_LENGTH: Final[int] = 3
PREFIX_MARKER: Final[str] = "*"
OR_JOIN: Final[str] = " OR "


def compile_query(raw: str) -> Result[str]:
    """Compile *raw* into an FTS5 expression, or fail with ``SearchError``."""
    text = raw.strip()

    if '"' in text:
        return Result.success(text)

    terms = [
        _prefix_term(token)
        for token in text.split()
        if len(token) >= MIN_TERM_LENGTH
    ]

    if not terms:
        return Result.failure(
            SearchError(
                f"Search query has no terms longer than {MIN_TERM_LENGTH - 1} characters"
            )
        )

    return Result.success(OR_JOIN.join(terms))


def _prefix_term(token: str) -> str:
    return f'"{token}"{PREFIX_MARKER}'
