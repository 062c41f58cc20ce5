from __future__ import annotations

from pathlib import Path
from typing import Optional

from agent_demo import config


def _root(root: Optional[Path] = None) -> Path:
    return (root or config.project_root()).resolve()


def _resolve(path: str, root: Path) -> Path:
    p = Path(path)
    if not p.is_absolute():
        p = root / p
    return p.resolve()


def _within_root(p: Path, root: Path) -> bool:
    try:
        p.relative_to(root)
        return True
    except ValueError:
        return False


async def read_file(filename: str, *, root: Optional[Path] = None) -> dict:
    base = _root(root)
    p = _resolve(filename, base)
    try:
        if not p.exists():
            return {"error": f"File {filename} not found."}
        return {"content": p.read_text(encoding="utf-8")}
    except Exception as e:
        return {"error": str(e)}


async def write_file(filepath: str, content: str, *, root: Optional[Path] = None) -> dict:
    base = _root(root)
    p = _resolve(filepath, base)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(str(content), encoding="utf-8")
        return {"success": True, "message": f"File written to {p}"}
    except Exception as e:
        return {"error": str(e)}


async def delete_file(filepath: str, *, root: Optional[Path] = None) -> dict:
    """
    Delete a single file. Only paths inside the project root are accepted.
    """
    base = _root(root)
    p = _resolve(filepath, base)
    if not _within_root(p, base):
        return {"error": f"Cannot delete file outside project root: {filepath}"}
    try:
        if not p.exists():
            return {"error": f"File {filepath} not found."}
        if p.is_dir():
            return {"error": f"{filepath} is a directory, not a file."}
        p.unlink()
        return {"success": True, "message": f"File {filepath} deleted successfully."}
    except Exception as e:
        return {"error": str(e)}
