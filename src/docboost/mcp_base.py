"""
MCP Server Base Classes

Implements JSON-RPC 2.0 over a line-delimited stdio transport, the tool
base class and the immutable tool registry.

Usage:
    registry = ToolRegistry([SearchDocumentation(search), GetDatabaseSchema(schema)])
    server = MCPServer(name="doc-boost", version="1.0.0", registry=registry)
    server.start()
"""

from __future__ import annotations

import json
import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, Generic, TextIO, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from docboost.errors import (
    DocsError,
    ErrorKind,
    ProtocolError,
    Result,
    ToolError,
    ValidationError,
)
from docboost.json_rpc import (
    JsonRpcErrorResponse,
    JsonRpcRequest,
    JsonRpcResponse,
    decode_request,
    encode_message,
)

# ─── Type Variables ──────────────────────────────────────────────────────────

TParams = TypeVar("TParams", bound=BaseModel)
TResult = TypeVar("TResult", bound=BaseModel)

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

_logger = logging.getLogger("docboost.server")


class ErrorCodes:
    """JSON-RPC error codes used on the wire."""

    PARSE_ERROR = -32700
    METHOD_NOT_FOUND = -32601
    APPLICATION_ERROR = -32000


def error_code_for(kind: ErrorKind) -> int:
    """Map an internal error kind to its wire code."""
    if kind is ErrorKind.PARSE:
        return ErrorCodes.PARSE_ERROR
    if kind is ErrorKind.PROTOCOL:
        return ErrorCodes.METHOD_NOT_FOUND
    return ErrorCodes.APPLICATION_ERROR


# ─── Tool Definition ─────────────────────────────────────────────────────────


class ToolDefinition(BaseModel):
    """What ``tools/list`` advertises for one tool."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# ─── Tool Base Class ─────────────────────────────────────────────────────────


class MCPTool(ABC, Generic[TParams, TResult]):
    """
    Abstract base class for MCP tools.

    Every tool must define:
    - name: the name clients pass to ``tools/call``
    - description: for the assistant
    - Params type: pydantic BaseModel, also the source of ``inputSchema``
    - Result type: pydantic BaseModel for the structured payload
    - execute(): the implementation, returning a ``Result``
    """

    name: str = ""
    description: str = ""

    @abstractmethod
    def execute(self, params: TParams) -> Result[TResult]:
        """Execute the tool with validated parameters."""
        ...

    def get_params_model(self) -> type[BaseModel]:
        """Get the Pydantic model class for params validation."""
        for base in type(self).__orig_bases__:  # type: ignore[attr-defined]
            if hasattr(base, "__args__") and len(base.__args__) >= 1:
                return base.__args__[0]
        raise TypeError(f"Tool {self.name} must specify Generic params type")

    def get_input_schema(self) -> dict[str, Any]:
        """Generate JSON Schema from the Pydantic params model."""
        return self.get_params_model().model_json_schema()

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.get_input_schema(),
        )

    def call(self, arguments: Any) -> Result[dict[str, Any]]:
        """Validate raw ``tools/call`` arguments, execute, and dump the payload."""
        if not isinstance(arguments, Mapping):
            return Result.failure(ValidationError(
                f"Arguments for {self.name} must be an object"
            ))

        try:
            params = self.get_params_model().model_validate(dict(arguments))
        except PydanticValidationError as e:
            return Result.failure(ValidationError(
                f"Invalid arguments for {self.name}: {_describe_errors(e)}"
            ))

        result = self.execute(params)  # type: ignore[arg-type]
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]

        data = result.value
        if isinstance(data, BaseModel):
            return Result.success(data.model_dump(mode="json"))
        return Result.success(data)


def _describe_errors(error: PydanticValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "arguments"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


# ─── Tool Registry ───────────────────────────────────────────────────────────


class ToolRegistry:
    """Immutable name -> tool table, fixed when the server starts."""

    def __init__(self, tools: Iterable[MCPTool[Any, Any]]) -> None:
        table: dict[str, MCPTool[Any, Any]] = {}
        for tool in tools:
            if not tool.name:
                raise ValueError(f"{type(tool).__name__} has no name")
            if tool.name in table:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            table[tool.name] = tool
        self._tools: Mapping[str, MCPTool[Any, Any]] = MappingProxyType(table)

    def get(self, name: str) -> MCPTool[Any, Any] | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.to_definition() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[MCPTool[Any, Any]]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


# ─── MCP Server ──────────────────────────────────────────────────────────────


class MCPServer:
    """
    Line-delimited JSON-RPC server.

    Reads one request per line, dispatches it, and writes at most one
    response line before reading the next request. Nothing short of end of
    input stops the loop.
    """

    def __init__(self, name: str, version: str, registry: ToolRegistry) -> None:
        self.name = name
        self.version = version
        self.registry = registry

    def start(self) -> None:
        """Serve on stdin/stdout until stdin is closed (blocking)."""
        self.serve(sys.stdin, sys.stdout)

    def serve(self, instream: TextIO, outstream: TextIO) -> None:
        """Main loop: read a line, dispatch, write and flush the response."""
        _logger.info("%s %s listening", self.name, self.version)
        for line in iter(instream.readline, ""):
            response = self.handle_line(line)
            if response is not None:
                outstream.write(encode_message(response) + "\n")
                outstream.flush()
        _logger.info("Input closed, shutting down")

    def handle_line(self, line: str) -> JsonRpcResponse | JsonRpcErrorResponse | None:
        """Handle one raw input line; ``None`` means nothing is written back."""
        line = line.strip()
        if not line:
            return None

        decoded = decode_request(line)
        if not decoded.ok:
            return _error(None, decoded.error)  # type: ignore[arg-type]

        request = decoded.unwrap()
        response = self.handle_request(request)
        if request.is_notification:
            return None
        return response

    def handle_request(self, request: JsonRpcRequest) -> JsonRpcResponse | JsonRpcErrorResponse:
        """Dispatch a decoded request to a built-in method."""
        _logger.debug("dispatch %s (id=%r)", request.method, request.id)

        if request.method == "initialize":
            return JsonRpcResponse(request.id, self._build_init_result(request.params))

        if request.method == "tools/list":
            return JsonRpcResponse(
                request.id,
                {"tools": [d.to_wire() for d in self.registry.definitions()]},
            )

        if request.method == "tools/call":
            return self._handle_tool_call(request)

        if request.method == "ping":
            return JsonRpcResponse(request.id, {"status": "ok"})

        return _error(request.id, ProtocolError("Method not found"))

    def _build_init_result(self, params: Any) -> dict[str, Any]:
        """Build the initialization result payload."""
        protocol_version = DEFAULT_PROTOCOL_VERSION
        if isinstance(params, Mapping) and isinstance(params.get("protocolVersion"), str):
            protocol_version = params["protocolVersion"]
        return {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": self.name, "version": self.version},
            "capabilities": {"tools": {"listChanged": False}},
        }

    def _handle_tool_call(self, request: JsonRpcRequest) -> JsonRpcResponse | JsonRpcErrorResponse:
        """Handle a tools/call request."""
        params = request.params if isinstance(request.params, Mapping) else {}
        tool_name = params.get("name", "")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        tool = self.registry.get(tool_name) if isinstance(tool_name, str) else None
        if tool is None:
            return _error(request.id, ToolError(f"Unknown tool: {tool_name}"))

        try:
            result = tool.call(arguments)
        except Exception as e:
            _logger.exception("Tool %s raised", tool_name)
            return JsonRpcErrorResponse(
                request.id, ErrorCodes.APPLICATION_ERROR, f"Internal error: {e!s}"
            )

        if not result.ok:
            _logger.warning("Tool %s failed: %s", tool_name, result.error)
            return _error(request.id, result.error)  # type: ignore[arg-type]

        return JsonRpcResponse(
            request.id,
            {"content": [{"type": "text", "text": json.dumps(result.value, indent=4)}]},
        )


def _error(request_id: Any, error: DocsError) -> JsonRpcErrorResponse:
    return JsonRpcErrorResponse(request_id, error_code_for(error.kind), error.message)
