"""
Shared fakes for the test suite (imported as ``helpers``).
"""

import json
from typing import Any, Dict, List, Optional

from agent_demo.runtime.llm.provider import Completion, ToolCallRequest


class FakeLLM:
    """
    Scripted LLM. Each step is either a Completion or a callable that
    receives the OpenAI-format conversation and returns one.
    """

    def __init__(self, steps: List[Any]):
        self.steps = list(steps)
        self.calls: List[Dict[str, Any]] = []

    async def complete(
        self,
        *,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
    ) -> Completion:
        self.calls.append(
            {"model": model, "messages": list(messages), "tools": tools, "tool_choice": tool_choice}
        )
        if not self.steps:
            return Completion(text="")
        step = self.steps.pop(0)
        if callable(step):
            return step(messages)
        return step


def tool_call(name: str, args: Dict[str, Any], call_id: str = "call_1") -> Completion:
    return Completion(tool_calls=[ToolCallRequest(id=call_id, name=name, arguments=json.dumps(args))])


def answer_from_last_tool_result(messages: List[Dict[str, Any]]) -> Completion:
    last = messages[-1]
    assert last["role"] == "tool"
    payload = json.loads(last["content"])
    return Completion(text=f"The answer is {payload['result']}.")


class Never:
    def requires_action(self, text: str) -> bool:
        return False


class Always:
    def requires_action(self, text: str) -> bool:
        return True
