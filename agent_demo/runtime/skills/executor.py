from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from agent_demo import config
from agent_demo.runtime.skills.model import CodeBlock, Skill
from agent_demo.runtime.tools.shell import shell_run

logger = logging.getLogger("agent_demo.skills")

# language -> (file suffix, argv prefix). Anything else runs through the shell.
_INTERPRETERS: Dict[str, tuple] = {
    "python": (".py", [sys.executable]),
    "python3": (".py", [sys.executable]),
    "py": (".py", [sys.executable]),
    "javascript": (".js", ["node"]),
    "js": (".js", ["node"]),
    "node": (".js", ["node"]),
    "typescript": (".ts", ["npx", "--yes", "tsx"]),
    "ts": (".ts", ["npx", "--yes", "tsx"]),
}


class SkillExecutor:
    def __init__(self, *, timeout_s: Optional[float] = None):
        self.timeout_s = float(timeout_s if timeout_s is not None else config.skills_script_timeout_s())

    def _env(self, skill: Skill, task: str, context: str) -> Dict[str, str]:
        env = dict(os.environ)
        env["SKILL_DIR"] = str(skill.base_dir)
        env["SKILL_TASK"] = task
        env["SKILL_CONTEXT"] = context
        return env

    async def run_block(self, skill: Skill, block: CodeBlock, *, task: str = "", context: str = "") -> Dict[str, Any]:
        language = block.language or "shell"
        env = self._env(skill, task, context)
        cwd = str(skill.base_dir)
        interp = _INTERPRETERS.get(block.language)

        if interp is None:
            res = await shell_run(block.code, cwd=cwd, env=env, timeout_s=self.timeout_s)
        else:
            suffix, argv = interp
            # The directory (and script) is removed on every exit path.
            with tempfile.TemporaryDirectory(prefix="skill_") as tmp:
                script = Path(tmp) / f"script{suffix}"
                script.write_text(block.code, encoding="utf-8")
                res = await shell_run([*argv, str(script)], cwd=cwd, env=env, timeout_s=self.timeout_s)

        out: Dict[str, Any] = {
            "index": block.index,
            "language": language,
            "success": bool(res.get("ok")),
            "output": res.get("output", ""),
        }
        if "returncode" in res:
            out["exitCode"] = res["returncode"]
        if res.get("error"):
            out["error"] = res["error"]
        if not out["success"]:
            logger.warning("skill %s block %d (%s) failed", skill.dir_name, block.index, language)
        return out

    async def run(
        self,
        skill: Skill,
        *,
        task: str = "",
        context: str = "",
        script_index: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Run one block (script_index) or every executable block, sequentially and in source order.
        """
        if script_index is not None:
            if script_index < 0 or script_index >= len(skill.code_blocks):
                return {
                    "success": False,
                    "skill": skill.name,
                    "error": f"scriptIndex {script_index} out of range (skill has {len(skill.code_blocks)} code blocks)",
                }
            block = skill.code_blocks[script_index]
            if not block.executable:
                return {
                    "success": False,
                    "skill": skill.name,
                    "error": f"Code block {script_index} ({block.language}) is not executable",
                }
            blocks = [block]
        else:
            blocks = skill.executable_blocks()

        results: List[Dict[str, Any]] = []
        for block in blocks:
            try:
                results.append(await self.run_block(skill, block, task=task, context=context))
            except Exception as e:
                results.append(
                    {
                        "index": block.index,
                        "language": block.language or "shell",
                        "success": False,
                        "output": "",
                        "error": str(e),
                    }
                )

        return {
            "success": all(r["success"] for r in results),
            "skill": skill.name,
            "task": task,
            "executionResults": results,
        }
