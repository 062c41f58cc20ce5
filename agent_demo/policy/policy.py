from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from agent_demo import config

# "Do something" requests; the model must reach for a tool rather than answer in prose.
DEFAULT_ACTION_KEYWORDS: List[str] = [
    "提交",
    "commit",
    "push",
    "执行",
    "execute",
    "做",
    "完成",
    "帮我",
    "请",
    "git",
    "add",
    "status",
]


class ActionClassifier(Protocol):
    def requires_action(self, text: str) -> bool:
        ...


@dataclass(frozen=True)
class KeywordActionClassifier:
    keywords: Sequence[str]

    @staticmethod
    def load() -> "KeywordActionClassifier":
        return KeywordActionClassifier(keywords=tuple(config.action_keywords() or DEFAULT_ACTION_KEYWORDS))

    def requires_action(self, text: str) -> bool:
        low = (text or "").lower()
        if not low or not self.keywords:
            return False
        pattern = "|".join(re.escape(k.lower()) for k in self.keywords)
        return re.search(pattern, low) is not None


def last_user_text(messages: List[Dict[str, Any]]) -> str:
    """
    String content of the last message; structured content is never classified.
    """
    if not messages:
        return ""
    last = messages[-1]
    content = last.get("content") if isinstance(last, dict) else None
    return content if isinstance(content, str) else ""


def tool_choice_for(messages: List[Dict[str, Any]], classifier: Optional[ActionClassifier]) -> str:
    if classifier is None:
        return "auto"
    return "required" if classifier.requires_action(last_user_text(messages)) else "auto"
