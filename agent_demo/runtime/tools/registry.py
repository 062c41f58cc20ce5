from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping

logger = logging.getLogger("agent_demo.registry")

# OpenAI function names: ^[a-zA-Z0-9_-]{1,64}$
MAX_TOOL_NAME_LEN = 64

ToolExecutor = Callable[[Dict[str, Any]], Awaitable[Any]]


def function_name(raw: str, fallback: str = "tool") -> str:
    """
    Make a valid OpenAI function name. Over-long names are cut and given a
    short hash of the full name, so distinct inputs stay distinct.
    """
    name = re.sub(r"[^a-zA-Z0-9_-]+", "_", raw.strip()).strip("_") or fallback
    if len(name) <= MAX_TOOL_NAME_LEN:
        return name
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    short = f"{name[: MAX_TOOL_NAME_LEN - len(digest) - 1]}_{digest}"
    logger.warning("tool name %s is longer than %d characters; using %s", name, MAX_TOOL_NAME_LEN, short)
    return short


@dataclass(frozen=True)
class ToolDefinition:
    """
    name: OpenAI function name (letters, digits, '_' and '-')
    parameters: JSON schema of the tool input
    """

    name: str
    description: str
    parameters: Dict[str, Any]
    executor: ToolExecutor

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolRegistry:
    """
    Immutable name -> ToolDefinition map. Built once at startup.
    """

    def __init__(self, tools: Mapping[str, ToolDefinition]):
        self._tools = MappingProxyType(dict(tools))

    @classmethod
    def from_list(cls, tools: List[ToolDefinition]) -> "ToolRegistry":
        return cls({t.name: t for t in tools})

    def get_tools(self) -> Mapping[str, ToolDefinition]:
        return self._tools

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        return [t.to_openai_tool() for t in self._tools.values()]

    def get(self, name: str) -> ToolDefinition:
        if name not in self._tools:
            raise KeyError(f"Tool not found: {name}")
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
