from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger("agent_demo.mcp")

_ENV_TOKEN = re.compile(r"\$\{env:([^}]+)\}")


@dataclass(frozen=True)
class MCPServerConfig:
    name: str
    transport: str  # stdio | sse | http (only stdio is implemented)
    command: str = ""
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)


def interpolate(value: str, workspace_folder: str) -> str:
    """
    Resolve Cursor-style tokens: ${env:NAME}, ${userHome}, ${workspaceFolder},
    ${workspaceFolderBasename}, ${pathSeparator} and ${/}.
    Unknown env names resolve to an empty string.
    """
    out = _ENV_TOKEN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    out = out.replace("${userHome}", str(Path.home()))
    out = out.replace("${workspaceFolderBasename}", os.path.basename(workspace_folder.rstrip("/\\")))
    out = out.replace("${workspaceFolder}", workspace_folder)
    out = out.replace("${pathSeparator}", os.sep)
    out = out.replace("${/}", os.sep)
    return out


def interpolate_object(obj: Any, workspace_folder: str) -> Any:
    if isinstance(obj, str):
        return interpolate(obj, workspace_folder)
    if isinstance(obj, list):
        return [interpolate_object(x, workspace_folder) for x in obj]
    if isinstance(obj, dict):
        return {k: interpolate_object(v, workspace_folder) for k, v in obj.items()}
    return obj


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def load_env_file(env_file: str, workspace_folder: str) -> Dict[str, str]:
    p = Path(env_file)
    if not p.is_absolute():
        p = Path(workspace_folder) / p
    if not p.exists():
        logger.warning("env file not found: %s", p)
        return {}

    env: Dict[str, str] = {}
    for line in p.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#") or "=" not in s:
            continue
        key, value = s.split("=", 1)
        key = key.strip()
        if key:
            env[key] = _strip_quotes(value.strip())
    return env


def read_mcp_config(paths: Sequence[Path]) -> Optional[Dict[str, Any]]:
    """
    Return the first readable config among paths (project first, then global).
    """
    for p in paths:
        if not p.exists():
            continue
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except Exception as e:
            logger.error("failed to read MCP config %s: %s", p, e)
            continue
        if isinstance(data, dict):
            logger.info("using MCP config %s", p)
            return data
        logger.error("MCP config %s is not a JSON object", p)
    return None


def parse_server_config(name: str, raw: Dict[str, Any], workspace_folder: str) -> MCPServerConfig:
    cfg = interpolate_object(raw, workspace_folder)
    transport = str(cfg.get("type") or ("sse" if cfg.get("url") else "stdio")).strip().lower()

    env: Dict[str, str] = {}
    if cfg.get("envFile"):
        env.update(load_env_file(str(cfg["envFile"]), workspace_folder))
    explicit = cfg.get("env")
    if isinstance(explicit, dict):
        env.update({str(k): str(v) for k, v in explicit.items()})

    args = cfg.get("args")
    headers = cfg.get("headers")
    return MCPServerConfig(
        name=name,
        transport=transport,
        command=str(cfg.get("command") or ""),
        args=[str(a) for a in args] if isinstance(args, list) else [],
        env=env,
        url=str(cfg.get("url") or ""),
        headers={str(k): str(v) for k, v in headers.items()} if isinstance(headers, dict) else {},
    )


def load_server_configs(paths: Sequence[Path], workspace_folder: str) -> List[MCPServerConfig]:
    data = read_mcp_config(paths)
    servers = (data or {}).get("mcpServers")
    if not isinstance(servers, dict) or not servers:
        logger.info("no MCP servers configured (looked in: %s)", ", ".join(str(p) for p in paths))
        return []

    out: List[MCPServerConfig] = []
    for name, raw in servers.items():
        if not isinstance(raw, dict):
            logger.warning("skipping MCP server %s: config must be an object", name)
            continue
        try:
            out.append(parse_server_config(str(name), raw, workspace_folder))
        except Exception as e:
            logger.error("skipping MCP server %s: %s", name, e)
    return out
