from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol


@dataclass
class ToolCallRequest:
    id: str
    name: str
    arguments: str  # raw JSON text from the model


@dataclass
class Completion:
    text: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)


class LLMProvider(Protocol):
    async def complete(
        self,
        *,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
    ) -> Completion:
        ...
