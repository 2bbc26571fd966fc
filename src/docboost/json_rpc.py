"""
JSON-RPC 2.0 Transport Utilities

Decoding of request lines and encoding of response envelopes for the MCP
server. Used by mcp_base.py; tool implementations never see these types.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from docboost.errors import ParseError, Result

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int, float, None]


@dataclass(frozen=True)
class JsonRpcRequest:
    """A decoded JSON-RPC 2.0 request or notification."""

    method: str
    id: RequestId = None
    params: Any = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        """Messages without an id (or with a null id) get no response."""
        return self.id is None


@dataclass(frozen=True)
class JsonRpcResponse:
    """A JSON-RPC 2.0 success response."""

    id: RequestId
    result: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "result": self.result}


@dataclass(frozen=True)
class JsonRpcErrorResponse:
    """A JSON-RPC 2.0 error response."""

    id: RequestId
    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "error": error}


JsonRpcMessage = Union[JsonRpcRequest, JsonRpcResponse, JsonRpcErrorResponse]


def decode_request(line: str) -> Result[JsonRpcRequest]:
    """
    Decode one line of input.

    Anything that is not a JSON object fails with ``ParseError``: without an
    object there is no id to echo back.
    """
    try:
        msg = json.loads(line)
    except (json.JSONDecodeError, RecursionError):
        return Result.failure(ParseError("Parse error"))

    if not isinstance(msg, dict):
        return Result.failure(ParseError("Parse error"))

    method = msg.get("method")
    params = msg.get("params")
    return Result.success(JsonRpcRequest(
        method=method if isinstance(method, str) else "",
        id=msg.get("id"),
        params={} if params is None else params,
    ))


def encode_message(message: JsonRpcResponse | JsonRpcErrorResponse) -> str:
    """Serialize a response as one compact JSON line (without the newline)."""
    return json.dumps(message.to_dict(), separators=(",", ":"))
