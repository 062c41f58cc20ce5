from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from agent_demo import config
from agent_demo.policy.policy import ActionClassifier, KeywordActionClassifier, tool_choice_for
from agent_demo.runtime.capabilities.provider import CapabilityProvider
from agent_demo.runtime.capabilities.registry import CapabilityRegistry
from agent_demo.runtime.llm import LLMProvider, OpenAIChatProvider, ToolCallRequest
from agent_demo.runtime.messages import assistant_message, to_openai_messages, tool_message
from agent_demo.runtime.prompts.system_prompt import build_system_prompt
from agent_demo.runtime.providers import LocalProvider, MCPProvider, SkillsProvider
from agent_demo.runtime.tools.registry import ToolRegistry

logger = logging.getLogger("agent_demo.runtime")

COMPLETION_NOTICE = "Task completed. I executed the requested tools."


@dataclass
class ChatResult:
    messages: List[Dict[str, Any]]
    text: str
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


def default_providers(root: Path) -> List[CapabilityProvider]:
    # Order is precedence: later providers override earlier ones on name collisions.
    return [LocalProvider(root=root), MCPProvider(workspace=root), SkillsProvider()]


class Runtime:
    def __init__(
        self,
        *,
        providers: Optional[List[CapabilityProvider]] = None,
        llm: Optional[LLMProvider] = None,
        classifier: Optional[ActionClassifier] = None,
        model: Optional[str] = None,
        max_steps: Optional[int] = None,
        project_root: Optional[Path] = None,
    ):
        self.project_root = (project_root or config.project_root()).resolve()
        self.capabilities = CapabilityRegistry(
            providers if providers is not None else default_providers(self.project_root)
        )
        self.tools = ToolRegistry({})
        self.classifier = classifier or KeywordActionClassifier.load()
        self.model = model or config.llm_model_name()
        self.max_steps = max_steps or config.llm_max_steps()
        # Constructed on first use so the gateway can start without OPENAI_API_KEY.
        self._llm = llm

    async def startup(self) -> None:
        self.tools = await self.capabilities.load()

    async def shutdown(self) -> None:
        await self.capabilities.shutdown()

    def _get_llm(self) -> LLMProvider:
        if self._llm is None:
            self._llm = OpenAIChatProvider(temperature=config.llm_temperature())
        return self._llm

    async def execute_tool(self, name: str, args: Dict[str, Any]) -> Any:
        """
        Run one tool. Never raises: failures come back as {"error": ...} for the model to see.
        """
        try:
            tool = self.tools.get(name)
        except KeyError:
            return {"error": f"Unknown tool: {name}"}
        try:
            return await tool.executor(args)
        except Exception as e:
            logger.exception("tool %s raised", name)
            return {"error": str(e) or type(e).__name__}

    async def _run_calls(self, calls: List[ToolCallRequest]) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        for call in calls:
            try:
                args = json.loads(call.arguments) if call.arguments else {}
            except json.JSONDecodeError:
                args = None
            if not isinstance(args, dict):
                output: Any = {"error": f"Invalid JSON arguments for tool {call.name}"}
                args = {}
            else:
                output = await self.execute_tool(call.name, args)
            records.append({"toolCallId": call.id, "toolName": call.name, "input": args, "output": output})
        return records

    async def chat(self, messages: List[Dict[str, Any]]) -> ChatResult:
        """
        One bounded tool-calling exchange over the caller's full history.

        Returns only the messages produced here (assistant turns with tool calls,
        tool results, final assistant text), in order.
        """
        llm = self._get_llm()
        tools = self.tools.to_openai_tools() or None
        forced = tool_choice_for(messages, self.classifier)

        convo: List[Dict[str, Any]] = [
            {
                "role": "system",
                "content": build_system_prompt(tool_names=self.tools.names(), project_root=self.project_root),
            }
        ]
        convo.extend(to_openai_messages(messages))

        new_messages: List[Dict[str, Any]] = []
        records: List[Dict[str, Any]] = []
        text = ""

        for step in range(self.max_steps):
            # Forcing applies to the first step only, so the model can still answer in prose afterwards.
            choice = forced if step == 0 else "auto"
            completion = await llm.complete(model=self.model, messages=convo, tools=tools, tool_choice=choice)
            text = completion.text

            if not completion.tool_calls:
                if text:
                    new_messages.append(assistant_message(text, []))
                break

            step_records = await self._run_calls(completion.tool_calls)
            records.extend(step_records)

            calls = [{"id": r["toolCallId"], "name": r["toolName"], "input": r["input"]} for r in step_records]
            new_messages.append(assistant_message(text, calls))
            new_messages.append(
                tool_message([{"id": r["toolCallId"], "name": r["toolName"], "output": r["output"]} for r in step_records])
            )

            convo.append(
                {
                    "role": "assistant",
                    "content": text or None,
                    "tool_calls": [
                        {
                            "id": c.id,
                            "type": "function",
                            "function": {"name": c.name, "arguments": c.arguments or "{}"},
                        }
                        for c in completion.tool_calls
                    ],
                }
            )
            for r in step_records:
                convo.append(
                    {
                        "role": "tool",
                        "tool_call_id": r["toolCallId"],
                        "content": json.dumps(r["output"], ensure_ascii=False, default=str),
                    }
                )
        else:
            logger.warning("reached max tool-calling steps (%d)", self.max_steps)

        if records:
            logger.info("tools used: %s", ", ".join(r["toolName"] for r in records))
            if not text:
                text = COMPLETION_NOTICE

        return ChatResult(messages=new_messages, text=text, tool_calls=records)
