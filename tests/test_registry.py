"""
Capability registry: provider order, collisions and startup failures.
"""

from typing import List

import pytest

from agent_demo.runtime.capabilities.registry import CapabilityRegistry
from agent_demo.runtime.tools.registry import ToolDefinition, ToolRegistry


def _tool(name: str, marker: str) -> ToolDefinition:
    async def _run(args):
        return {"from": marker}

    return ToolDefinition(name=name, description=f"{name} ({marker})", parameters={"type": "object"}, executor=_run)


class StaticProvider:
    def __init__(self, name: str, names: List[str], fail_startup: bool = False):
        self.name = name
        self._names = names
        self.fail_startup = fail_startup
        self.started = False
        self.stopped = False

    async def startup(self) -> None:
        if self.fail_startup:
            raise RuntimeError("cannot start")
        self.started = True

    def tools(self) -> List[ToolDefinition]:
        if not self.started:
            return []
        return [_tool(n, self.name) for n in self._names]

    async def shutdown(self) -> None:
        self.stopped = True


@pytest.mark.asyncio
async def test_tools_from_all_providers_in_order():
    reg = await CapabilityRegistry([StaticProvider("local", ["a", "b"]), StaticProvider("mcp", ["s_c"])]).load()
    assert reg.names() == ["a", "b", "s_c"]
    assert len(reg) == 3
    assert "s_c" in reg
    assert [t["function"]["name"] for t in reg.to_openai_tools()] == ["a", "b", "s_c"]


@pytest.mark.asyncio
async def test_later_provider_wins_collision(caplog):
    reg = await CapabilityRegistry([StaticProvider("local", ["calc"]), StaticProvider("skills", ["calc"])]).load()
    assert len(reg) == 1
    assert await reg.get("calc").executor({}) == {"from": "skills"}
    assert "tool name collision: calc from skills overrides local" in caplog.text


@pytest.mark.asyncio
async def test_failing_provider_contributes_nothing(caplog):
    good = StaticProvider("local", ["a"])
    bad = StaticProvider("mcp", ["x"], fail_startup=True)
    cap = CapabilityRegistry([good, bad])
    reg = await cap.load()
    assert reg.names() == ["a"]
    assert "provider mcp failed to start" in caplog.text

    await cap.shutdown()
    assert good.stopped and bad.stopped


def test_registry_is_read_only():
    reg = ToolRegistry.from_list([_tool("a", "x")])
    with pytest.raises(TypeError):
        reg.get_tools()["b"] = _tool("b", "x")
    with pytest.raises(KeyError):
        reg.get("missing")
