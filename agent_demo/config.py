from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional


@lru_cache(maxsize=1)
def load_config(path: str = "agent_demo.json") -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _get(cfg: Dict[str, Any], *path: str, default: Any = None) -> Any:
    cur: Any = cfg
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def gateway_host() -> str:
    env = os.getenv("GATEWAY_HOST")
    if env:
        return env
    cfg = load_config()
    return str(_get(cfg, "gateway", "host", default="127.0.0.1"))


def gateway_port() -> int:
    env = os.getenv("GATEWAY_PORT")
    if env:
        try:
            return int(env)
        except ValueError:
            pass
    cfg = load_config()
    try:
        return int(_get(cfg, "gateway", "port", default=3001))
    except Exception:
        return 3001


def llm_model_name() -> str:
    cfg = load_config()
    return str(_get(cfg, "llm", "model_name", default="gpt-4o-mini"))


def llm_max_steps() -> int:
    cfg = load_config()
    try:
        return max(1, int(_get(cfg, "llm", "max_steps", default=10)))
    except Exception:
        return 10


def llm_temperature() -> Optional[float]:
    cfg = load_config()
    v = _get(cfg, "llm", "temperature", default=None)
    if v is None:
        return None
    try:
        return float(v)
    except Exception:
        return None


def project_root() -> Path:
    """
    Root directory for file tools and the ${workspaceFolder} MCP token.
    """
    cfg = load_config()
    v = _get(cfg, "tools", "project_root", default=None)
    root = str(v).strip() if v is not None else ""
    return Path(os.path.expanduser(root or os.getcwd())).resolve()


def mcp_config_paths() -> List[Path]:
    """
    Candidate MCP config files, most specific first.
    """
    cfg = load_config()
    v = _get(cfg, "mcp", "config_paths", default=None)
    if isinstance(v, list) and v:
        return [Path(os.path.expanduser(str(x))) for x in v]
    return [
        project_root() / ".cursor" / "mcp.json",
        Path.home() / ".cursor" / "mcp.json",
    ]


def skills_dir() -> Path:
    cfg = load_config()
    v = _get(cfg, "skills", "dir", default="~/.cursor/skills")
    return Path(os.path.expanduser(str(v or "~/.cursor/skills")))


def skills_script_timeout_s() -> float:
    cfg = load_config()
    try:
        return float(_get(cfg, "skills", "script_timeout_s", default=60))
    except Exception:
        return 60.0


def action_keywords() -> Optional[List[str]]:
    cfg = load_config()
    v = _get(cfg, "policy", "action_keywords", default=None)
    if isinstance(v, list) and v:
        return [str(x) for x in v if str(x).strip()]
    return None
