"""
Conversion between the chat client's message format and OpenAI chat messages.

The client speaks in messages whose ``content`` is either a string or a list
of parts::

    {"type": "text", "text": "..."}
    {"type": "tool-call", "toolCallId": "...", "toolName": "...", "input": {...}}
    {"type": "tool-result", "toolCallId": "...", "toolName": "...",
     "output": {"type": "json", "value": ...}}

The client appends whatever we return and sends the whole history back on the
next turn, so both directions have to round-trip.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

logger = logging.getLogger("agent_demo.runtime")


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _text_of(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            str(p.get("text", "")) for p in content if isinstance(p, dict) and p.get("type") == "text"
        )
    return ""


def _tool_output_text(part: Dict[str, Any]) -> str:
    output = part.get("output", part.get("result"))
    if isinstance(output, dict) and output.get("type") in ("text", "error-text"):
        return str(output.get("value", ""))
    if isinstance(output, dict) and "value" in output and output.get("type") in ("json", "error-json"):
        return _dumps(output["value"])
    return _dumps(output)


def to_openai_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for m in messages:
        if not isinstance(m, dict):
            logger.debug("skipping non-object message: %r", m)
            continue
        role = m.get("role")
        content = m.get("content")

        if role in ("system", "user"):
            out.append({"role": role, "content": _text_of(content)})
        elif role == "assistant":
            msg: Dict[str, Any] = {"role": "assistant", "content": _text_of(content) or None}
            calls = []
            if isinstance(content, list):
                for p in content:
                    if isinstance(p, dict) and p.get("type") == "tool-call":
                        calls.append(
                            {
                                "id": str(p.get("toolCallId", "")),
                                "type": "function",
                                "function": {
                                    "name": str(p.get("toolName", "")),
                                    "arguments": _dumps(p.get("input", p.get("args", {})) or {}),
                                },
                            }
                        )
            if calls:
                msg["tool_calls"] = calls
            elif msg["content"] is None:
                msg["content"] = ""
            out.append(msg)
        elif role == "tool":
            if not isinstance(content, list):
                logger.debug("skipping tool message without structured results")
                continue
            for p in content:
                if isinstance(p, dict) and p.get("type") == "tool-result":
                    out.append(
                        {
                            "role": "tool",
                            "tool_call_id": str(p.get("toolCallId", "")),
                            "content": _tool_output_text(p),
                        }
                    )
        else:
            logger.debug("skipping message with unknown role: %r", role)
    return out


def assistant_message(text: str, tool_calls: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    tool_calls: [{"id", "name", "input"}]
    """
    parts: List[Dict[str, Any]] = []
    if text:
        parts.append({"type": "text", "text": text})
    for tc in tool_calls:
        parts.append(
            {"type": "tool-call", "toolCallId": tc["id"], "toolName": tc["name"], "input": tc["input"]}
        )
    return {"role": "assistant", "content": parts}


def tool_message(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    results: [{"id", "name", "output"}]
    """
    return {
        "role": "tool",
        "content": [
            {
                "type": "tool-result",
                "toolCallId": r["id"],
                "toolName": r["name"],
                "output": {"type": "json", "value": r["output"]},
            }
            for r in results
        ],
    }
