from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from agent_demo import config
from agent_demo.runtime.skills.model import CodeBlock, Skill

logger = logging.getLogger("agent_demo.skills")

SKILL_FILE = "SKILL.md"

# A block closes only on a fence with exactly as many backticks as it opened with.
_FENCE = re.compile(r"^(`{3,})(?!`)[ \t]*([^\s`]*)[^\n]*\n(.*?)^\1[ \t]*$", re.MULTILINE | re.DOTALL)


def _unquote(v: str) -> str:
    if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
        return v[1:-1]
    return v


def _parse_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Minimal frontmatter parser for SKILL.md:
    - Optional block delimited by '---' at the top
    - Only supports simple 'key: value' lines
    Returns (meta, body).
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text
    meta: Dict[str, Any] = {}
    i = 1
    closed = False
    while i < len(lines):
        line = lines[i]
        i += 1
        if line.strip() == "---":
            closed = True
            break
        if ":" in line:
            k, v = line.split(":", 1)
            key = k.strip()
            if key:
                meta[key] = _unquote(v.strip())
    if not closed:
        # Unterminated frontmatter: treat the whole file as body.
        return {}, text
    body = "\n".join(lines[i:]).lstrip("\n")
    return meta, body


def extract_code_blocks(markdown: str) -> List[CodeBlock]:
    blocks: List[CodeBlock] = []
    for m in _FENCE.finditer(markdown):
        blocks.append(CodeBlock(index=len(blocks), language=m.group(2).strip().lower(), code=m.group(3).strip()))
    return blocks


def parse_skill(path: Path) -> Skill:
    text = path.read_text(encoding="utf-8")
    meta, body = _parse_frontmatter(text)
    dir_name = path.parent.name
    return Skill(
        name=str(meta.get("name") or dir_name).strip(),
        dir_name=dir_name,
        description=str(meta.get("description") or "").strip(),
        path=path,
        base_dir=path.parent,
        body=body.strip(),
        meta=meta,
        code_blocks=tuple(extract_code_blocks(body)),
    )


class SkillsLoader:
    def __init__(self, skills_dir: Optional[Path] = None):
        self.skills_dir = Path(os.path.expanduser(str(skills_dir or config.skills_dir())))

    def discover(self) -> List[Skill]:
        """
        One skill per immediate subdirectory containing SKILL.md, sorted by directory name.
        """
        root = self.skills_dir
        if not root.is_dir():
            logger.info("skills directory not found: %s", root)
            return []

        skills: List[Skill] = []
        for sub in sorted(root.iterdir(), key=lambda p: p.name):
            path = sub / SKILL_FILE
            if not sub.is_dir() or not path.is_file():
                continue
            try:
                skill = parse_skill(path)
            except Exception as e:
                logger.warning("failed to load skill %s: %s", path, e)
                continue
            skills.append(skill)
            logger.info(
                "loaded skill %s (%d code blocks, executable=%s)",
                skill.dir_name,
                len(skill.code_blocks),
                skill.has_executable_scripts,
            )
        return skills
