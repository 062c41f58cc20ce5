from __future__ import annotations

from datetime import datetime


async def current_time() -> dict:
    now = datetime.now().astimezone()
    return {"time": now.strftime("%m/%d/%Y, %I:%M:%S %p"), "iso": now.isoformat(timespec="seconds")}
