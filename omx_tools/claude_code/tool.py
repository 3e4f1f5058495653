"""
claude_code tools: delegate a prompt to the Claude CLI in the background,
then poll, cancel and list the resulting jobs.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from config import env
from omx_tools.claude_code.executor import ClaudeCliConfig, ClaudeCodeLauncher
from omx_tools.claude_code.types import JobStartedResponse
from omx_tools.interfaces import JobToolInterface
from omx_tools.plugin import register_tool
from utils.async_jobs import JobError, JobManager

logger = logging.getLogger(__name__)

# Shared by all claude_code tools, created on first use
_job_manager: Optional[JobManager] = None


def get_job_manager() -> JobManager:
    """Get the process-wide job manager, building it from settings if needed."""
    global _job_manager
    if _job_manager is None:
        launcher = ClaudeCodeLauncher(ClaudeCliConfig(cli_path=env.get_claude_cli_name()))
        _job_manager = JobManager.from_settings(launcher, env.get_job_settings())
        logger.info(
            f"Created job manager using Claude CLI: {launcher.config.get_cli_path()}"
        )
    return _job_manager


def set_job_manager(manager: Optional[JobManager]) -> None:
    """Replace the process-wide job manager (None resets it)."""
    global _job_manager
    _job_manager = manager


class ClaudeCodeToolBase(JobToolInterface):
    """Shared plumbing of the claude_code tools."""

    @property
    def job_manager(self) -> JobManager:
        return get_job_manager()

    @staticmethod
    def _error(error: JobError) -> Dict[str, Any]:
        return {"success": False, "error": error.message}


@register_tool()
class ClaudeCodeTool(ClaudeCodeToolBase):
    """Start a Claude CLI job and return its id immediately."""

    @property
    def name(self) -> str:
        return "claude_code"

    @property
    def description(self) -> str:
        return (
            "Delegate a task to Claude Code CLI (async). Starts the job in the "
            "background and returns a jobId immediately. Then call "
            "claude_code_status to wait for the result."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "The detailed natural language prompt for Claude to execute.",
                },
                "workFolder": {
                    "type": "string",
                    "description": "Absolute path to the working directory. Defaults to the home directory.",
                },
            },
            "required": ["prompt"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        try:
            job_id = await self.job_manager.create_job(
                arguments.get("prompt"), arguments.get("workFolder")
            )
        except JobError as e:
            return self._error(e)
        return JobStartedResponse.for_job(job_id).to_wire()


@register_tool()
class ClaudeCodeStatusTool(ClaudeCodeToolBase):
    """Long-poll a Claude CLI job for its result."""

    @property
    def name(self) -> str:
        return "claude_code_status"

    @property
    def description(self) -> str:
        return (
            "Check status of a claude_code job. Waits up to waitSeconds (default 25, "
            "max 25) for the job to finish, then returns the output or a tail of "
            "the output so far."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "jobId": {
                    "type": "string",
                    "description": "The job ID returned by claude_code.",
                },
                "waitSeconds": {
                    "type": "number",
                    "description": "Max seconds to wait for completion (0-25). Default: 25.",
                },
            },
            "required": ["jobId"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        try:
            snapshot = await self.job_manager.get_status(
                arguments.get("jobId"), arguments.get("waitSeconds")
            )
        except JobError as e:
            return self._error(e)
        return snapshot.to_wire()


@register_tool()
class ClaudeCodeCancelTool(ClaudeCodeToolBase):
    """Cancel a running Claude CLI job."""

    @property
    def name(self) -> str:
        return "claude_code_cancel"

    @property
    def description(self) -> str:
        return "Cancel a running claude_code job."

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "jobId": {
                    "type": "string",
                    "description": "The job ID to cancel.",
                },
            },
            "required": ["jobId"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Union[str, Dict[str, Any]]:
        try:
            outcome = self.job_manager.cancel_job(arguments.get("jobId"))
        except JobError as e:
            return self._error(e)
        return outcome.message


@register_tool()
class ClaudeCodeListTool(ClaudeCodeToolBase):
    """List Claude CLI jobs, newest first."""

    @property
    def name(self) -> str:
        return "claude_code_list"

    @property
    def description(self) -> str:
        return "List all claude_code jobs (running and recent)."

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": ["all", "running", "completed", "failed", "cancelled"],
                    "description": "Filter by status. Default: all.",
                },
            },
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Union[str, List[Dict[str, Any]], Dict[str, Any]]:
        try:
            summaries = self.job_manager.list_jobs(arguments.get("status") or None)
        except JobError as e:
            return self._error(e)
        if not summaries:
            return "No jobs found."
        return [summary.to_wire() for summary in summaries]


async def shutdown_job_manager() -> None:
    """Shut down the job manager if one was created, killing running jobs."""
    global _job_manager
    if _job_manager is None:
        return
    manager, _job_manager = _job_manager, None
    await manager.shutdown()
