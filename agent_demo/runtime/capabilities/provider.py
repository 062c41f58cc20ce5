from __future__ import annotations

from typing import List, Protocol

from agent_demo.runtime.tools.registry import ToolDefinition


class CapabilityProvider(Protocol):
    """
    Pluggable source of tools for the runtime.

    startup() does all discovery work (spawning MCP servers, scanning skill
    folders). It must not raise: a provider that fails contributes no tools.
    """

    name: str

    async def startup(self) -> None:
        ...

    def tools(self) -> List[ToolDefinition]:
        ...

    async def shutdown(self) -> None:
        ...
