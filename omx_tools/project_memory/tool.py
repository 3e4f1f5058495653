"""Project memory tools: facts about a project that outlive any one session."""

from typing import Any, Dict

from omx_tools.interfaces import ToolInterface
from omx_tools.plugin import register_tool
from utils.documents import DocumentValidationError, ProjectMemoryStore


@register_tool()
class MemoryReadTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_memory_read"

    @property
    def description(self) -> str:
        return (
            "Read project memory for a given work folder. Stores tech stack, conventions, "
            "build commands, notes: anything that should persist across sessions for this project."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "workFolder": {
                    "type": "string",
                    "description": "Project root directory (absolute path). Required.",
                },
            },
            "required": ["workFolder"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        work_folder = arguments.get("workFolder")
        try:
            data = ProjectMemoryStore().read(work_folder)
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}
        if data is None:
            return {"exists": False, "workFolder": work_folder}
        return data


@register_tool()
class MemoryWriteTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_memory_write"

    @property
    def description(self) -> str:
        return "Write/update project memory for a given work folder. Merges with existing memory."

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "workFolder": {
                    "type": "string",
                    "description": "Project root directory (absolute path).",
                },
                "data": {
                    "type": "object",
                    "description": (
                        "Memory data to merge. Common keys: techStack, buildCommand, testCommand, "
                        "conventions, structure, notes."
                    ),
                    "additionalProperties": True,
                },
                "replace": {
                    "type": "boolean",
                    "description": "If true, replaces memory entirely. Default: false.",
                },
            },
            "required": ["workFolder", "data"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        work_folder = arguments.get("workFolder")
        try:
            ProjectMemoryStore().write(
                work_folder, arguments.get("data"), replace=bool(arguments.get("replace", False))
            )
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}
        except OSError as e:
            return {"success": False, "error": f"Operation failed: {e}"}
        return {"ok": True, "workFolder": work_folder}
