"""Workflow state tools: per-mode JSON state shared across sessions."""

from typing import Any, Dict, List, Union

from config import env
from omx_tools.interfaces import ToolInterface
from omx_tools.plugin import register_tool
from utils.documents import DocumentValidationError, WorkflowStateStore


def _store() -> WorkflowStateStore:
    return WorkflowStateStore(env.get_state_dir())


MODE_PROPERTY = {
    "type": "string",
    "description": "Mode name: autopilot, plan, research, tdd, review, analyze, or any custom name.",
}


@register_tool()
class StateReadTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_state_read"

    @property
    def description(self) -> str:
        return (
            "Read the state for a workflow mode (autopilot, plan, research, tdd, etc.). "
            "Returns JSON state, or exists: false if no state exists."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {"mode": MODE_PROPERTY},
            "required": ["mode"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        mode = arguments.get("mode")
        try:
            data = _store().read(mode)
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}
        if data is None:
            return {"exists": False, "mode": mode}
        return data


@register_tool()
class StateWriteTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_state_write"

    @property
    def description(self) -> str:
        return (
            "Write or update state for a workflow mode. Pass a JSON object with the "
            "state data. Merges with existing state by default."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "mode": {"type": "string", "description": "Mode name."},
                "data": {
                    "type": "object",
                    "description": "State data to write/merge.",
                    "additionalProperties": True,
                },
                "replace": {
                    "type": "boolean",
                    "description": "If true, replaces state entirely instead of merging. Default: false.",
                },
            },
            "required": ["mode", "data"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        mode = arguments.get("mode")
        try:
            state = _store().write(
                mode, arguments.get("data"), replace=bool(arguments.get("replace", False))
            )
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}
        except OSError as e:
            return {"success": False, "error": f"Operation failed: {e}"}
        return {"ok": True, "mode": mode, "state": state}


@register_tool()
class StateClearTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_state_clear"

    @property
    def description(self) -> str:
        return "Clear/delete state for a workflow mode."

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {"mode": {"type": "string", "description": "Mode name to clear."}},
            "required": ["mode"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        mode = arguments.get("mode")
        try:
            _store().clear(mode)
        except DocumentValidationError as e:
            return {"success": False, "error": str(e)}
        except OSError as e:
            return {"success": False, "error": f"Operation failed: {e}"}
        return {"ok": True, "mode": mode, "cleared": True}


@register_tool()
class StateListTool(ToolInterface):
    @property
    def name(self) -> str:
        return "omx_state_list"

    @property
    def description(self) -> str:
        return "List all active workflow modes with their state summaries."

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute_tool(self, arguments: Dict[str, Any]) -> Union[str, List[Dict[str, Any]]]:
        modes = _store().list_modes()
        return modes if modes else "No active modes."
