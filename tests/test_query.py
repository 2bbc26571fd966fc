"""
Tests for the query compiler.

Covers prefix-term expansion, short-token suppression, the phrase escape
hatch and the explicit failure on queries with nothing left to match.
"""

from __future__ import annotations

import pytest

from docboost.errors import SearchError
from docboost.query import compile_query
from docboost.store import DocumentStore


class TestCompileQuery:
    """Expression building."""

    def test_tokens_become_or_of_prefix_terms(self) -> None:
        assert compile_query("save data").unwrap() == '"save"* OR "data"*'

    def test_input_is_trimmed(self) -> None:
        assert compile_query("   belongsToMany  ").unwrap() == '"belongsToMany"*'

    def test_short_tokens_are_dropped(self) -> None:
        assert compile_query("how to save it").unwrap() == '"how"* OR "save"*'

    def test_punctuation_and_operators_are_literal(self) -> None:
        assert compile_query("save() NOT null").unwrap() == '"save()"* OR "NOT"* OR "null"*'

    def test_quoted_query_passes_through(self) -> None:
        raw = '"saving data" OR belongsToMany'
        assert compile_query(raw).unwrap() == raw

    @pytest.mark.parametrize("raw", ["", "   ", "a to it", "is an ok"])
    def test_nothing_to_match_is_an_error(self, raw: str) -> None:
        result = compile_query(raw)

        assert not result.ok
        assert isinstance(result.error, SearchError)

    def test_compiled_expression_is_valid_fts5(self, store: DocumentStore) -> None:
        """Punctuation-heavy input must never reach the engine as bad syntax."""
        expression = compile_query("$this->Articles->save($entity) AND (OR) NEAR:x").unwrap()

        assert store.query(expression, 10).ok
