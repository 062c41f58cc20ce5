from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from agent_demo.runtime.capabilities.provider import CapabilityProvider
from agent_demo.runtime.tools.registry import ToolDefinition, ToolRegistry

logger = logging.getLogger("agent_demo.registry")


@dataclass
class CapabilityRegistry:
    """
    Merges provider tools in list order. Later providers win on name collisions.
    """

    providers: List[CapabilityProvider]

    async def startup(self) -> None:
        for p in self.providers:
            try:
                await p.startup()
            except Exception:
                logger.exception("provider %s failed to start; it contributes no tools", p.name)

    async def shutdown(self) -> None:
        for p in reversed(self.providers):
            try:
                await p.shutdown()
            except Exception:
                logger.exception("provider %s failed to shut down cleanly", p.name)

    def build(self) -> ToolRegistry:
        merged: Dict[str, ToolDefinition] = {}
        owner: Dict[str, str] = {}
        for p in self.providers:
            try:
                tools = p.tools()
            except Exception:
                logger.exception("provider %s failed to list tools", p.name)
                continue
            for t in tools:
                if t.name in merged:
                    logger.warning(
                        "tool name collision: %s from %s overrides %s", t.name, p.name, owner[t.name]
                    )
                merged[t.name] = t
                owner[t.name] = p.name
        logger.info("tool registry built: %d tools (%s)", len(merged), ", ".join(merged.keys()))
        return ToolRegistry(merged)

    async def load(self) -> ToolRegistry:
        await self.startup()
        return self.build()
