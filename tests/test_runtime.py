"""
Agent loop: tool execution, forced tool choice, step bound and the
completion notice.
"""

from pathlib import Path

import pytest

from agent_demo.runtime.llm.provider import Completion, ToolCallRequest
from agent_demo.runtime.providers.local_provider import LocalProvider
from agent_demo.runtime.runtime import COMPLETION_NOTICE, Runtime
from agent_demo.runtime.tools.registry import ToolDefinition, ToolRegistry
from helpers import Always, FakeLLM, Never, answer_from_last_tool_result, tool_call


async def _runtime(tmp_path: Path, llm: FakeLLM, **kwargs) -> Runtime:
    rt = Runtime(
        providers=[LocalProvider(root=tmp_path)],
        llm=llm,
        classifier=kwargs.pop("classifier", Never()),
        model="test-model",
        project_root=tmp_path,
        **kwargs,
    )
    await rt.startup()
    return rt


@pytest.mark.asyncio
async def test_calculator_round_trip(tmp_path: Path):
    llm = FakeLLM([tool_call("calculate", {"expression": "2+2"}), answer_from_last_tool_result])
    rt = await _runtime(tmp_path, llm)

    result = await rt.chat([{"role": "user", "content": "What is 2+2?"}])

    assert result.text == "The answer is 4."
    assert result.has_tool_calls
    assert result.tool_calls == [
        {"toolCallId": "call_1", "toolName": "calculate", "input": {"expression": "2+2"}, "output": {"result": 4}}
    ]
    assistant, tool, final = result.messages
    assert assistant["content"][0]["type"] == "tool-call"
    assert tool["content"][0]["output"] == {"type": "json", "value": {"result": 4}}
    assert final == {"role": "assistant", "content": [{"type": "text", "text": "The answer is 4."}]}

    first = llm.calls[0]
    assert first["model"] == "test-model"
    assert first["messages"][0]["role"] == "system"
    assert "calculate" in first["messages"][0]["content"]
    assert {t["function"]["name"] for t in first["tools"]} >= {"calculate", "readFile", "deleteFile"}


@pytest.mark.asyncio
async def test_plain_answer_has_no_tool_calls(tmp_path: Path):
    rt = await _runtime(tmp_path, FakeLLM([Completion(text="Hi!")]))
    result = await rt.chat([{"role": "user", "content": "hello"}])
    assert result.text == "Hi!"
    assert not result.has_tool_calls
    assert result.messages == [{"role": "assistant", "content": [{"type": "text", "text": "Hi!"}]}]


@pytest.mark.asyncio
async def test_tool_choice_is_forced_on_first_step_only(tmp_path: Path):
    llm = FakeLLM([tool_call("getCurrentTime", {}), Completion(text="It is late.")])
    rt = await _runtime(tmp_path, llm, classifier=Always())
    await rt.chat([{"role": "user", "content": "commit my code"}])
    assert [c["tool_choice"] for c in llm.calls] == ["required", "auto"]


@pytest.mark.asyncio
async def test_unknown_tool_and_bad_arguments_are_reported_to_the_model(tmp_path: Path):
    llm = FakeLLM(
        [
            tool_call("doesNotExist", {}, call_id="c1"),
            Completion(tool_calls=[ToolCallRequest(id="c2", name="calculate", arguments="{oops")]),
            Completion(text="Sorry."),
        ]
    )
    rt = await _runtime(tmp_path, llm)
    result = await rt.chat([{"role": "user", "content": "x"}])

    outputs = [r["output"] for r in result.tool_calls]
    assert outputs == [
        {"error": "Unknown tool: doesNotExist"},
        {"error": "Invalid JSON arguments for tool calculate"},
    ]
    assert result.text == "Sorry."


@pytest.mark.asyncio
async def test_completion_notice_when_model_ends_silently(tmp_path: Path):
    llm = FakeLLM([tool_call("writeFile", {"filepath": "a.txt", "content": "x"}), Completion(text="")])
    rt = await _runtime(tmp_path, llm)
    result = await rt.chat([{"role": "user", "content": "write a file"}])

    assert result.text == COMPLETION_NOTICE
    assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "x"
    # The notice is reported as text only; no extra assistant message is produced.
    assert [m["role"] for m in result.messages] == ["assistant", "tool"]


@pytest.mark.asyncio
async def test_step_limit(tmp_path: Path):
    llm = FakeLLM([tool_call("getCurrentTime", {}, call_id=f"c{i}") for i in range(10)])
    rt = await _runtime(tmp_path, llm, max_steps=3)
    result = await rt.chat([{"role": "user", "content": "loop"}])

    assert len(llm.calls) == 3
    assert [r["toolCallId"] for r in result.tool_calls] == ["c0", "c1", "c2"]
    assert result.text == COMPLETION_NOTICE


@pytest.mark.asyncio
async def test_tool_exception_becomes_error_output(tmp_path: Path):
    rt = await _runtime(tmp_path, FakeLLM([]))

    async def _boom(args):
        raise ValueError("kaput")

    rt.tools = ToolRegistry.from_list([ToolDefinition("boom", "", {"type": "object"}, _boom)])
    assert await rt.execute_tool("boom", {}) == {"error": "kaput"}
