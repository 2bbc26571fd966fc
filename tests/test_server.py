"""
Tests for the MCP server loop.

Drives MCPServer through in-memory streams and checks the exact wire
output for the built-in methods, error envelopes and tool dispatch.
"""

from __future__ import annotations

import io
import json
from typing import Any

from pydantic import BaseModel

from docboost.errors import Result
from docboost.mcp_base import MCPServer, MCPTool, ToolRegistry


def _serve(server: MCPServer, *lines: str) -> list[str]:
    out = io.StringIO()
    server.serve(io.StringIO("".join(f"{line}\n" for line in lines)), out)
    return out.getvalue().splitlines()


def _call(server: MCPServer, request: dict[str, Any]) -> dict[str, Any]:
    [line] = _serve(server, json.dumps(request))
    return json.loads(line)


class _FlushCountingStream(io.StringIO):
    def __init__(self) -> None:
        super().__init__()
        self.flushes: list[str] = []

    def flush(self) -> None:
        self.flushes.append(self.getvalue())
        super().flush()


class _BoomParams(BaseModel):
    pass


class _Boom(MCPTool[_BoomParams, _BoomParams]):
    name = "boom"
    description = "Always raises"

    def execute(self, params: _BoomParams) -> Result[_BoomParams]:
        raise RuntimeError("kaboom")


# ─── Built-in Methods ─────────────────────────────────────────────────────────


class TestBuiltinMethods:
    """initialize, tools/list, ping and unknown methods."""

    def test_ping_exact_output(self, server: MCPServer) -> None:
        lines = _serve(server, '{"jsonrpc":"2.0","id":1,"method":"ping"}')

        assert lines == ['{"jsonrpc":"2.0","id":1,"result":{"status":"ok"}}']

    def test_initialize(self, server: MCPServer) -> None:
        response = _call(server, {
            "jsonrpc": "2.0", "id": 0, "method": "initialize",
            "params": {"protocolVersion": "2025-03-26", "capabilities": {}},
        })

        result = response["result"]
        assert result["protocolVersion"] == "2025-03-26"
        assert result["serverInfo"] == {"name": "doc-boost", "version": "1.0.0"}
        assert "tools" in result["capabilities"]

    def test_initialize_without_params_uses_default_version(self, server: MCPServer) -> None:
        response = _call(server, {"jsonrpc": "2.0", "id": 0, "method": "initialize"})

        assert response["result"]["protocolVersion"] == "2024-11-05"

    def test_tools_list(self, server: MCPServer) -> None:
        response = _call(server, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

        tools = response["result"]["tools"]
        assert [t["name"] for t in tools] == ["search_documentation", "get_database_schema"]
        for tool in tools:
            assert set(tool) == {"name", "description", "inputSchema"}

    def test_unknown_method(self, server: MCPServer) -> None:
        response = _call(server, {"jsonrpc": "2.0", "id": "abc", "method": "resources/list"})

        assert response == {
            "jsonrpc": "2.0",
            "id": "abc",
            "error": {"code": -32601, "message": "Method not found"},
        }


# ─── Transport ────────────────────────────────────────────────────────────────


class TestTransport:
    """Line handling, parse errors and notifications."""

    def test_parse_error_then_recovers(self, server: MCPServer) -> None:
        lines = _serve(server, "not-json", '{"jsonrpc":"2.0","id":2,"method":"ping"}')

        assert lines == [
            '{"jsonrpc":"2.0","id":null,"error":{"code":-32700,"message":"Parse error"}}',
            '{"jsonrpc":"2.0","id":2,"result":{"status":"ok"}}',
        ]

    def test_non_object_json_is_parse_error(self, server: MCPServer) -> None:
        lines = _serve(server, "[1, 2, 3]", "42")

        assert [json.loads(line)["error"]["code"] for line in lines] == [-32700, -32700]

    def test_blank_lines_are_skipped(self, server: MCPServer) -> None:
        lines = _serve(server, "", "   ", '{"jsonrpc":"2.0","id":3,"method":"ping"}', "")

        assert len(lines) == 1

    def test_notifications_get_no_response(self, server: MCPServer) -> None:
        lines = _serve(
            server,
            '{"jsonrpc":"2.0","method":"notifications/initialized"}',
            '{"jsonrpc":"2.0","method":"ping"}',
            '{"jsonrpc":"2.0","id":null,"method":"ping"}',
        )

        assert lines == []

    def test_each_response_flushed(self, server: MCPServer) -> None:
        out = _FlushCountingStream()
        requests = "".join(
            json.dumps({"jsonrpc": "2.0", "id": i, "method": "ping"}) + "\n" for i in range(3)
        )

        server.serve(io.StringIO(requests), out)

        assert len(out.flushes) == 3
        assert [len(snapshot.splitlines()) for snapshot in out.flushes] == [1, 2, 3]

    def test_string_ids_echoed(self, server: MCPServer) -> None:
        response = _call(server, {"jsonrpc": "2.0", "id": "req-9", "method": "ping"})

        assert response["id"] == "req-9"


# ─── tools/call ───────────────────────────────────────────────────────────────


class TestToolsCall:
    """Dispatch to registered tools."""

    def test_search_documentation(self, server: MCPServer) -> None:
        response = _call(server, {
            "jsonrpc": "2.0", "id": 4, "method": "tools/call",
            "params": {"name": "search_documentation", "arguments": {"query": "save data", "limit": 3}},
        })

        content = response["result"]["content"]
        assert len(content) == 1
        assert content[0]["type"] == "text"
        assert "\n    " in content[0]["text"]
        payload = json.loads(content[0]["text"])
        assert payload["query"] == "save data"
        assert 0 < payload["total_results"] <= 3

    def test_unknown_tool(self, server: MCPServer) -> None:
        response = _call(server, {
            "jsonrpc": "2.0", "id": 7, "method": "tools/call",
            "params": {"name": "bogus_tool", "arguments": {}},
        })

        assert response["id"] == 7
        assert response["error"]["code"] == -32000
        assert "bogus_tool" in response["error"]["message"]

    def test_empty_query_is_application_error(self, server: MCPServer) -> None:
        lines = _serve(
            server,
            json.dumps({
                "jsonrpc": "2.0", "id": 5, "method": "tools/call",
                "params": {"name": "search_documentation", "arguments": {"query": ""}},
            }),
            '{"jsonrpc":"2.0","id":6,"method":"ping"}',
        )

        error = json.loads(lines[0])
        assert error["id"] == 5
        assert error["error"] == {"code": -32000, "message": "Query parameter is required"}
        assert json.loads(lines[1])["result"] == {"status": "ok"}

    def test_search_failure_is_application_error(self, server: MCPServer) -> None:
        response = _call(server, {
            "jsonrpc": "2.0", "id": 8, "method": "tools/call",
            "params": {"name": "search_documentation", "arguments": {"query": "to be"}},
        })

        assert response["error"]["code"] == -32000

    def test_missing_arguments(self, server: MCPServer) -> None:
        response = _call(server, {
            "jsonrpc": "2.0", "id": 9, "method": "tools/call",
            "params": {"name": "search_documentation"},
        })

        assert response["error"]["code"] == -32000
        assert "query" in response["error"]["message"]

    def test_params_not_an_object(self, server: MCPServer) -> None:
        response = _call(server, {"jsonrpc": "2.0", "id": 10, "method": "tools/call", "params": [1]})

        assert response["error"]["code"] == -32000
        assert response["error"]["message"].startswith("Unknown tool")

    def test_get_database_schema(self, server: MCPServer) -> None:
        response = _call(server, {
            "jsonrpc": "2.0", "id": 11, "method": "tools/call",
            "params": {"name": "get_database_schema", "arguments": {"table": "authors"}},
        })

        payload = json.loads(response["result"]["content"][0]["text"])
        assert payload["connection"] == "default"
        assert list(payload["tables"]) == ["authors"]

    def test_unexpected_tool_exception_does_not_stop_server(self) -> None:
        server = MCPServer(name="t", version="0", registry=ToolRegistry([_Boom()]))

        lines = _serve(
            server,
            '{"jsonrpc":"2.0","id":1,"method":"tools/call","params":{"name":"boom"}}',
            '{"jsonrpc":"2.0","id":2,"method":"ping"}',
        )

        first = json.loads(lines[0])
        assert first["error"]["code"] == -32000
        assert "kaboom" in first["error"]["message"]
        assert json.loads(lines[1])["result"] == {"status": "ok"}
