"""Session notepad tools. The notepad persists across conversation compaction."""

from typing import Any, Dict

from config import env
from omx_tools.interfaces import ToolInterface
from omx_tools.plugin import register_tool
from utils.documents import DocumentValidationError, Notepad


def _notepad() -> Notepad:
    settings = env.get_notepad_settings()
    return Notepad(
        env.get_notepad_path(),
        priority_max_chars=settings.priority_max_chars,
        working_retention_days=settings.working_retention_days,
    )


@register_tool()
class NoteReadTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_note_read"

    @property
    def description(self) -> str:
        return (
            "Read the session notepad. Sections: 'priority' (always-loaded context, max 500 chars), "
            "'working' (timestamped entries, auto-pruned after 7 days), 'manual' (permanent entries), "
            "or 'all' for everything."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "section": {
                    "type": "string",
                    "enum": ["all", "priority", "working", "manual"],
                    "description": "Section to read. Default: 'all'.",
                },
            },
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return _notepad().read(arguments.get("section"))
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}


@register_tool()
class NoteWriteTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_note_write"

    @property
    def description(self) -> str:
        return (
            "Write to the session notepad. For 'priority': replaces content (max 500 chars). "
            "For 'working': adds timestamped entry. For 'manual': adds permanent entry."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "section": {
                    "type": "string",
                    "enum": ["priority", "working", "manual"],
                    "description": "Section to write to.",
                },
                "content": {"type": "string", "description": "Content to write."},
            },
            "required": ["section", "content"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        section = arguments.get("section")
        try:
            _notepad().write(section, arguments.get("content"))
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}
        except OSError as e:
            return {"success": False, "error": f"Operation failed: {e}"}
        return {"ok": True, "section": section}
