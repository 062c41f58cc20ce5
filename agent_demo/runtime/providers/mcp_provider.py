from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from agent_demo import config
from agent_demo.runtime.mcp import MCPClientManager, load_server_configs, translate_call_result
from agent_demo.runtime.mcp.schema import tool_parameters
from agent_demo.runtime.tools.registry import ToolDefinition, function_name

logger = logging.getLogger("agent_demo.mcp")


class MCPProvider:
    """
    Tools imported from MCP servers over stdio, named "{server}_{tool}".
    """

    name = "mcp"

    def __init__(
        self,
        *,
        config_paths: Optional[Sequence[Path]] = None,
        workspace: Optional[Path] = None,
        manager: Optional[MCPClientManager] = None,
    ):
        self.config_paths = list(config_paths) if config_paths is not None else config.mcp_config_paths()
        self.workspace = (workspace or config.project_root()).resolve()
        self.mgr = manager or MCPClientManager()
        self._tools: List[ToolDefinition] = []

    async def startup(self) -> None:
        servers = load_server_configs(self.config_paths, str(self.workspace))
        for server in servers:
            if server.transport != "stdio":
                logger.warning(
                    "remote MCP servers (%s) are not supported yet; skipping %s", server.transport, server.name
                )
                continue
            try:
                logger.info("connecting to MCP server %s (%s)", server.name, server.command)
                await self.mgr.connect(server)
                tools = await self.mgr.list_tools(server.name)
            except Exception as e:
                logger.error("failed to connect to MCP server %s: %s", server.name, e)
                continue

            if not tools:
                logger.warning("no tools found in MCP server %s", server.name)
                continue
            logger.info("found %d tools from %s", len(tools), server.name)
            for t in tools:
                td = self._tool_definition(server.name, t)
                self._tools.append(td)
                logger.info("  - %s", td.name)

        if self._tools:
            logger.info("loaded %d MCP tools", len(self._tools))

    def _tool_definition(self, server: str, mcp_tool: Any) -> ToolDefinition:
        tool_name = str(getattr(mcp_tool, "name", "") or "")
        full_name = function_name(f"{server}_{tool_name}")
        mgr = self.mgr

        async def _call(args: Dict[str, Any]) -> Any:
            try:
                result = await mgr.call_tool(server=server, name=tool_name, arguments=args or {})
            except Exception as e:
                return {"success": False, "error": str(e) or "Failed to call MCP tool", "toolName": full_name}
            ok, payload = translate_call_result(result)
            if not ok:
                return {"success": False, "error": payload, "toolName": full_name}
            return {"success": True, "result": payload, "toolName": full_name}

        return ToolDefinition(
            name=full_name,
            description=str(getattr(mcp_tool, "description", "") or "") or f"MCP tool: {tool_name}",
            parameters=tool_parameters(getattr(mcp_tool, "inputSchema", None), full_name),
            executor=_call,
        )

    def tools(self) -> List[ToolDefinition]:
        return list(self._tools)

    async def shutdown(self) -> None:
        try:
            await self.mgr.close()
        finally:
            self._tools = []
