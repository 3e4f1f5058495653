"""Asynchronous delegation of prompts to the Claude Code CLI."""

from omx_tools.claude_code.executor import ClaudeCliConfig, ClaudeCodeLauncher, find_claude_cli
from omx_tools.claude_code.types import JobStartedResponse
from omx_tools.claude_code.tool import (
    ClaudeCodeTool,
    ClaudeCodeStatusTool,
    ClaudeCodeCancelTool,
    ClaudeCodeListTool,
    get_job_manager,
    set_job_manager,
    shutdown_job_manager,
)

__all__ = [
    "ClaudeCliConfig",
    "ClaudeCodeLauncher",
    "find_claude_cli",
    "JobStartedResponse",
    "ClaudeCodeTool",
    "ClaudeCodeStatusTool",
    "ClaudeCodeCancelTool",
    "ClaudeCodeListTool",
    "get_job_manager",
    "set_job_manager",
    "shutdown_job_manager",
]
