from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from agent_demo import config
from agent_demo.runtime.tools.calculator import calculate
from agent_demo.runtime.tools.clock import current_time
from agent_demo.runtime.tools.filesystem import delete_file, read_file, write_file
from agent_demo.runtime.tools.registry import ToolDefinition


class LocalProvider:
    name = "local"

    def __init__(self, *, root: Optional[Path] = None):
        self.root = (root or config.project_root()).resolve()

    async def startup(self) -> None:
        return None

    async def shutdown(self) -> None:
        return None

    def tools(self) -> List[ToolDefinition]:
        root = self.root

        async def _calculate(args: Dict[str, Any]) -> Any:
            return await calculate(str(args.get("expression", "")))

        async def _get_current_time(args: Dict[str, Any]) -> Any:
            return await current_time()

        async def _read_file(args: Dict[str, Any]) -> Any:
            return await read_file(str(args.get("filename", "")), root=root)

        async def _write_file(args: Dict[str, Any]) -> Any:
            return await write_file(str(args.get("filepath", "")), str(args.get("content", "")), root=root)

        async def _delete_file(args: Dict[str, Any]) -> Any:
            return await delete_file(str(args.get("filepath", "")), root=root)

        return [
            ToolDefinition(
                name="calculate",
                description="A tool for performing basic math calculations.",
                parameters={
                    "type": "object",
                    "properties": {"expression": {"type": "string", "description": "Arithmetic expression, e.g. (2+3)*4"}},
                    "required": ["expression"],
                },
                executor=_calculate,
            ),
            ToolDefinition(
                name="getCurrentTime",
                description="Get the current local time.",
                parameters={"type": "object", "properties": {}},
                executor=_get_current_time,
            ),
            ToolDefinition(
                name="readFile",
                description="Read the contents of a file in the project directory.",
                parameters={
                    "type": "object",
                    "properties": {"filename": {"type": "string", "description": "Relative to project root or absolute."}},
                    "required": ["filename"],
                },
                executor=_read_file,
            ),
            ToolDefinition(
                name="writeFile",
                description="Write content to a file at the specified path. If the file exists, it will be overwritten.",
                parameters={
                    "type": "object",
                    "properties": {
                        "filepath": {
                            "type": "string",
                            "description": "The path to the file to write. Relative to project root or absolute.",
                        },
                        "content": {"type": "string", "description": "The content to write to the file."},
                    },
                    "required": ["filepath", "content"],
                },
                executor=_write_file,
            ),
            ToolDefinition(
                name="deleteFile",
                description="Delete a file at the specified path. The file must exist and be within the project directory.",
                parameters={
                    "type": "object",
                    "properties": {
                        "filepath": {
                            "type": "string",
                            "description": "The path to the file to delete. Relative to project root or absolute.",
                        }
                    },
                    "required": ["filepath"],
                },
                executor=_delete_file,
            ),
        ]
