from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

# Untagged blocks ("") are run as shell.
EXECUTABLE_LANGUAGES = frozenset(
    {
        "",
        "bash",
        "sh",
        "shell",
        "zsh",
        "python",
        "python3",
        "py",
        "javascript",
        "js",
        "node",
        "typescript",
        "ts",
    }
)


@dataclass(frozen=True)
class CodeBlock:
    index: int
    language: str
    code: str

    @property
    def executable(self) -> bool:
        return self.language in EXECUTABLE_LANGUAGES

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "language": self.language or "shell", "code": self.code}


@dataclass(frozen=True)
class Skill:
    name: str
    dir_name: str
    description: str
    path: Path
    base_dir: Path
    body: str
    meta: Dict[str, Any] = field(default_factory=dict)
    code_blocks: Tuple[CodeBlock, ...] = ()

    @property
    def has_executable_scripts(self) -> bool:
        return any(b.executable for b in self.code_blocks)

    def executable_blocks(self) -> List[CodeBlock]:
        return [b for b in self.code_blocks if b.executable]
