from __future__ import annotations

from typing import Any, Dict, List


MESSAGES_REQUIRED = "Messages array is required"


def create_chat_response(*, messages: List[Dict[str, Any]], text: str, tool_calls: List[Dict[str, Any]]) -> dict:
    return {
        "messages": messages,
        "text": text,
        "toolCalls": tool_calls,
        "hasToolCalls": bool(tool_calls),
    }


def create_error(message: str) -> dict:
    return {"error": message}
