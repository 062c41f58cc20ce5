"""
MCP provider: tool naming, result translation and failure isolation.

Most tests drive the provider with a fake manager; one test starts a real
FastMCP server over stdio.
"""

import json
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, List

import pytest
from mcp.types import (
    CallToolResult,
    EmbeddedResource,
    ImageContent,
    TextContent,
    TextResourceContents,
    Tool,
)

from agent_demo.runtime.mcp import MCPError, translate_call_result
from agent_demo.runtime.providers.mcp_provider import MCPProvider


def _write_config(path: Path, servers: Dict[str, Any]) -> Path:
    path.write_text(json.dumps({"mcpServers": servers}), encoding="utf-8")
    return path


class FakeManager:
    def __init__(self, tools: Dict[str, List[Tool]], results: Dict[str, Any] = None, broken=()):
        self.tools = tools
        self.results = results or {}
        self.broken = set(broken)
        self.connected: List[str] = []
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def connect(self, server):
        if server.name in self.broken:
            raise OSError(f"cannot start {server.command}")
        self.connected.append(server.name)

    async def list_tools(self, server: str):
        return self.tools.get(server, [])

    async def call_tool(self, *, server: str, name: str, arguments=None):
        self.calls.append({"server": server, "name": name, "arguments": arguments})
        result = self.results[name]
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self):
        self.closed = True


def _text(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


class TestTranslateCallResult:
    def test_text_parts_are_joined(self):
        result = CallToolResult(
            content=[TextContent(type="text", text="line 1"), TextContent(type="text", text="line 2")]
        )
        assert translate_call_result(result) == (True, "line 1\nline 2")

    def test_resources_and_images(self):
        result = CallToolResult(
            content=[
                EmbeddedResource(
                    type="resource",
                    resource=TextResourceContents(uri="file:///a.txt", text="from resource", mimeType="text/plain"),
                ),
                ImageContent(type="image", data="aGk=", mimeType="image/png"),
            ]
        )
        assert translate_call_result(result) == (True, "from resource\n[image image/png]")

    def test_error_result(self):
        assert translate_call_result(_text("boom", is_error=True)) == (False, "boom")
        assert translate_call_result(CallToolResult(content=[], isError=True))[0] is False

    def test_empty_content_is_dumped(self):
        assert translate_call_result(CallToolResult(content=[])) == (True, "[]")


class TestMCPProvider:
    @pytest.mark.asyncio
    async def test_tools_are_prefixed_with_server_name(self, tmp_path: Path):
        cfg = _write_config(tmp_path / "mcp.json", {"git": {"command": "git-mcp"}})
        mgr = FakeManager(
            {
                "git": [
                    Tool(
                        name="commit",
                        description="Create a commit",
                        inputSchema={
                            "type": "object",
                            "properties": {"message": {"type": "string"}},
                            "required": ["message"],
                        },
                    ),
                    Tool(name="status", inputSchema={"type": "object"}),
                ]
            }
        )
        p = MCPProvider(config_paths=[cfg], workspace=tmp_path, manager=mgr)
        await p.startup()

        tools = {t.name: t for t in p.tools()}
        assert set(tools) == {"git_commit", "git_status"}
        assert tools["git_commit"].description == "Create a commit"
        assert tools["git_status"].description == "MCP tool: status"
        assert tools["git_commit"].parameters == {
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        }

    @pytest.mark.asyncio
    async def test_executor_wraps_results(self, tmp_path: Path):
        cfg = _write_config(tmp_path / "mcp.json", {"git": {"command": "git-mcp"}})
        mgr = FakeManager(
            {"git": [Tool(name="status", inputSchema={"type": "object"}), Tool(name="push", inputSchema={})]},
            results={"status": _text("clean"), "push": _text("rejected", is_error=True)},
        )
        p = MCPProvider(config_paths=[cfg], workspace=tmp_path, manager=mgr)
        await p.startup()
        tools = {t.name: t for t in p.tools()}

        assert await tools["git_status"].executor({}) == {"success": True, "result": "clean", "toolName": "git_status"}
        assert await tools["git_push"].executor({"force": True}) == {
            "success": False,
            "error": "rejected",
            "toolName": "git_push",
        }
        assert mgr.calls[-1] == {"server": "git", "name": "push", "arguments": {"force": True}}

    @pytest.mark.asyncio
    async def test_executor_reports_transport_errors(self, tmp_path: Path):
        cfg = _write_config(tmp_path / "mcp.json", {"s": {"command": "x"}})
        mgr = FakeManager({"s": [Tool(name="t", inputSchema={})]}, results={"t": MCPError("server went away")})
        p = MCPProvider(config_paths=[cfg], workspace=tmp_path, manager=mgr)
        await p.startup()
        out = await p.tools()[0].executor({})
        assert out == {"success": False, "error": "server went away", "toolName": "s_t"}

    @pytest.mark.asyncio
    async def test_failed_and_remote_servers_are_skipped(self, tmp_path: Path, caplog):
        cfg = _write_config(
            tmp_path / "mcp.json",
            {
                "broken": {"command": "does-not-exist"},
                "remote": {"url": "https://example.com/mcp"},
                "ok": {"command": "ok-mcp"},
            },
        )
        mgr = FakeManager({"ok": [Tool(name="ping", inputSchema={})]}, broken={"broken"})
        p = MCPProvider(config_paths=[cfg], workspace=tmp_path, manager=mgr)
        await p.startup()

        assert [t.name for t in p.tools()] == ["ok_ping"]
        assert mgr.connected == ["ok"]
        assert "failed to connect to MCP server broken" in caplog.text
        assert "skipping remote" in caplog.text

    @pytest.mark.asyncio
    async def test_no_config_means_no_tools(self, tmp_path: Path):
        mgr = FakeManager({})
        p = MCPProvider(config_paths=[tmp_path / "none.json"], workspace=tmp_path, manager=mgr)
        await p.startup()
        assert p.tools() == []
        await p.shutdown()
        assert mgr.closed

    def test_server_and_tool_names_are_sanitized(self, tmp_path: Path):
        p = MCPProvider(config_paths=[], workspace=tmp_path, manager=FakeManager({}))
        td = p._tool_definition("my server", Tool(name="do.thing", inputSchema={}))
        assert td.name == "my_server_do_thing"

    def test_over_long_names_are_capped_and_stay_distinct(self, tmp_path: Path, caplog):
        p = MCPProvider(config_paths=[], workspace=tmp_path, manager=FakeManager({}))
        base = "x" * 80
        first = p._tool_definition("server", Tool(name=base + "_read", inputSchema={})).name
        second = p._tool_definition("server", Tool(name=base + "_write", inputSchema={})).name
        assert len(first) == 64
        assert len(second) == 64
        assert first != second
        assert first.startswith("server_xxx")
        assert "longer than 64 characters" in caplog.text


SERVER_SCRIPT = textwrap.dedent(
    """
    from mcp.server.fastmcp import FastMCP

    mcp = FastMCP("calc")


    @mcp.tool()
    def add(a: int, b: int) -> int:
        \"\"\"Add two integers.\"\"\"
        return a + b


    if __name__ == "__main__":
        mcp.run()
    """
)


@pytest.mark.asyncio
async def test_real_stdio_server(tmp_path: Path):
    script = tmp_path / "calc_server.py"
    script.write_text(SERVER_SCRIPT, encoding="utf-8")
    cfg = _write_config(
        tmp_path / "mcp.json",
        {"calc": {"command": sys.executable, "args": ["${workspaceFolder}/calc_server.py"]}},
    )

    p = MCPProvider(config_paths=[cfg], workspace=tmp_path)
    await p.startup()
    try:
        tools = {t.name: t for t in p.tools()}
        assert "calc_add" in tools
        assert tools["calc_add"].description == "Add two integers."
        assert set(tools["calc_add"].parameters["properties"]) == {"a", "b"}
        out = await tools["calc_add"].executor({"a": 2, "b": 3})
        assert out == {"success": True, "result": "5", "toolName": "calc_add"}
    finally:
        await p.shutdown()
