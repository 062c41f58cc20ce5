from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Union


async def shell_run(
    command: Union[str, List[str]],
    *,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    timeout_s: float = 60,
) -> dict:
    """
    Run a shell command string, or an argv list without a shell.
    stdout and stderr are merged into a single "output" field.
    """
    try:
        if isinstance(command, str):
            proc = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=cwd,
                env=env,
            )
        else:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=cwd,
                env=env,
            )
    except OSError as e:
        return {"ok": False, "error": str(e), "output": ""}

    try:
        out, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        return {"ok": False, "error": f"Timeout after {timeout_s}s", "output": ""}
    return {
        "ok": proc.returncode == 0,
        "returncode": proc.returncode,
        "output": (out or b"").decode("utf-8", errors="replace"),
    }
