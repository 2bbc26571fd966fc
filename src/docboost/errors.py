"""
Error taxonomy and the Result value returned across component boundaries.

Components never let sqlite3, SQLAlchemy or pydantic exceptions escape:
they convert them into one of the ``DocsError`` kinds below and hand them
back inside a ``Result``. The protocol layer maps ``ErrorKind`` to a wire
code in exactly one place (``mcp_base.error_code_for``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Every failure mode the system distinguishes."""

    PARSE = "parse"
    PROTOCOL = "protocol"
    TOOL = "tool"
    VALIDATION = "validation"
    SEARCH = "search"
    STORE = "store"


# ─── Error Types ─────────────────────────────────────────────────────────────


class DocsError(Exception):
    """Base class for all doc-boost failures."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(DocsError):
    """A request line could not be decoded as a JSON-RPC message."""

    kind = ErrorKind.PARSE


class ProtocolError(DocsError):
    """The request named a method the server does not implement."""

    kind = ErrorKind.PROTOCOL


class ToolError(DocsError):
    """``tools/call`` named a tool that is not registered."""

    kind = ErrorKind.TOOL


class ValidationError(DocsError):
    """A tool argument was missing or had the wrong type."""

    kind = ErrorKind.VALIDATION


class SearchError(DocsError):
    """The query compiled to nothing usable, or the engine rejected it."""

    kind = ErrorKind.SEARCH


class StoreError(DocsError):
    """I/O or transactional failure in the index or a schema connection."""

    kind = ErrorKind.STORE


# ─── Result ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a component operation: a value or a ``DocsError``."""

    value: T | None = None
    error: DocsError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: DocsError) -> Result[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
