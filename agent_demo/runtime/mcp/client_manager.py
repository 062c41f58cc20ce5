from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, List, Optional, Tuple

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from agent_demo.runtime.mcp.config import MCPServerConfig

logger = logging.getLogger("agent_demo.mcp")


class MCPError(RuntimeError):
    pass


def translate_call_result(result: Any) -> Tuple[bool, Any]:
    """
    Flatten an MCP CallToolResult into (ok, payload).

    Text parts are joined; resources contribute their text or a marker;
    without any textual part the structured (or raw) content is JSON-dumped.
    """
    parts: List[str] = []
    content = getattr(result, "content", None) or []
    for item in content:
        kind = getattr(item, "type", "")
        if kind == "text":
            parts.append(str(getattr(item, "text", "")))
        elif kind == "resource":
            res = getattr(item, "resource", None)
            text = getattr(res, "text", None)
            if text is not None:
                parts.append(str(text))
            else:
                parts.append(f"[resource {getattr(res, 'uri', '')}]")
        elif kind == "resource_link":
            parts.append(f"[resource {getattr(item, 'uri', '')}]")
        elif kind in ("image", "audio"):
            parts.append(f"[{kind} {getattr(item, 'mimeType', '')}]")

    if parts:
        payload: Any = "\n".join(parts)
    else:
        structured = getattr(result, "structuredContent", None)
        if structured is not None:
            payload = json.dumps(structured, ensure_ascii=False, default=str)
        else:
            payload = json.dumps(
                [c.model_dump(mode="json") if hasattr(c, "model_dump") else c for c in content],
                ensure_ascii=False,
                default=str,
            )

    if getattr(result, "isError", False):
        return False, payload or "Unknown error"
    return True, payload


class MCPClientManager:
    """
    Owns the stdio sessions to configured MCP servers for the process lifetime.

    connect()/close() must run in the same task (anyio cancel scopes); the
    gateway calls them from its startup/shutdown hooks.
    """

    def __init__(self, *, client_name: str = "agent-demo", client_version: str = "1.0.0"):
        self.client_name = client_name
        self.client_version = client_version
        self._stack = AsyncExitStack()
        self.sessions: Dict[str, ClientSession] = {}

    async def connect(self, server: MCPServerConfig) -> ClientSession:
        if server.transport != "stdio":
            raise MCPError(f"Unsupported MCP transport: {server.transport}")
        if not server.command:
            raise MCPError(f"MCP server {server.name} has no command")

        params = StdioServerParameters(
            command=server.command,
            args=list(server.args),
            env=dict(server.env) if server.env else None,
        )
        server_stack = AsyncExitStack()
        try:
            read, write = await server_stack.enter_async_context(stdio_client(params))
            session = await server_stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except BaseException:
            await server_stack.aclose()
            raise
        self._stack.push_async_callback(server_stack.aclose)
        self.sessions[server.name] = session
        return session

    def session(self, server: str) -> ClientSession:
        s = self.sessions.get(server)
        if s is None:
            raise MCPError(f"MCP server '{server}' is not initialized")
        return s

    async def list_tools(self, server: str) -> List[Any]:
        result = await self.session(server).list_tools()
        return list(result.tools or [])

    async def call_tool(self, *, server: str, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        return await self.session(server).call_tool(name, arguments or {})

    async def close(self) -> None:
        self.sessions.clear()
        await self._stack.aclose()
        self._stack = AsyncExitStack()
