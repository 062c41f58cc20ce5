from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from agent_demo.runtime.skills.executor import SkillExecutor
from agent_demo.runtime.skills.loader import SkillsLoader
from agent_demo.runtime.skills.model import Skill
from agent_demo.runtime.tools.registry import ToolDefinition, function_name


def _tool_name(dir_name: str) -> str:
    return function_name("skill_" + (re.sub(r"[^a-zA-Z0-9_-]+", "_", dir_name).strip("_") or "unnamed"))


def _as_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes")
    return bool(v)


def _as_index(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


class SkillsProvider:
    name = "skills"

    def __init__(self, *, skills_dir: Optional[Path] = None, executor: Optional[SkillExecutor] = None):
        self.loader = SkillsLoader(skills_dir)
        self.executor = executor or SkillExecutor()
        self.skills: List[Skill] = []

    async def startup(self) -> None:
        self.skills = self.loader.discover()

    async def shutdown(self) -> None:
        return None

    def tools(self) -> List[ToolDefinition]:
        return [self._tool_definition(s) for s in self.skills]

    async def invoke(self, skill: Skill, args: Dict[str, Any]) -> Dict[str, Any]:
        task = str(args.get("task", "") or "")
        context = str(args.get("context", "") or "")

        if _as_bool(args.get("executeScript")) and skill.has_executable_scripts:
            return await self.executor.run(
                skill,
                task=task,
                context=context,
                script_index=_as_index(args.get("scriptIndex")),
            )

        return {
            "success": True,
            "skill": skill.name,
            "description": skill.description,
            "task": task,
            "context": context,
            "instructions": skill.body,
            "codeBlocks": [b.to_dict() for b in skill.code_blocks],
            "hasExecutableScripts": skill.has_executable_scripts,
        }

    def _tool_definition(self, skill: Skill) -> ToolDefinition:
        async def _invoke(args: Dict[str, Any]) -> Any:
            try:
                return await self.invoke(skill, args or {})
            except Exception as e:
                return {"success": False, "skill": skill.name, "error": str(e)}

        description = skill.description or f"Skill: {skill.name}"
        if skill.has_executable_scripts:
            description += (
                " This skill has runnable scripts: call with executeScript=true"
                " (optionally scriptIndex) to run them."
            )

        return ToolDefinition(
            name=_tool_name(skill.dir_name),
            description=description,
            parameters={
                "type": "object",
                "properties": {
                    "task": {"type": "string", "description": "What you want to accomplish with this skill"},
                    "context": {"type": "string", "description": "Optional extra context"},
                    "executeScript": {
                        "type": "boolean",
                        "description": "Run the skill's code blocks instead of returning its instructions",
                    },
                    "scriptIndex": {
                        "type": "integer",
                        "description": "Index of the code block to run (default: all executable blocks)",
                    },
                },
                "required": ["task"],
            },
            executor=_invoke,
        )
