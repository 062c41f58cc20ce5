from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from agent_demo.runtime.llm.provider import Completion, ToolCallRequest


class OpenAIChatProvider:
    """
    Non-streaming chat provider using OpenAI's Chat Completions API.

    Keeps a minimal surface area so we can swap to another provider (local models, etc.)
    without changing the runtime.
    """

    def __init__(self, api_key: Optional[str] = None, *, temperature: Optional[float] = None):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY", "")
        self.temperature = temperature

        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is not set")

        from openai import AsyncOpenAI  # type: ignore

        self._client = AsyncOpenAI(api_key=self.api_key)

    async def complete(
        self,
        *,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
    ) -> Completion:
        kwargs: Dict[str, Any] = {"model": model, "messages": messages}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = tool_choice
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        resp = await self._client.chat.completions.create(**kwargs)
        msg = resp.choices[0].message
        calls = [
            ToolCallRequest(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "")
            for tc in (msg.tool_calls or [])
            if getattr(tc, "function", None) is not None
        ]
        return Completion(text=msg.content or "", tool_calls=calls)
