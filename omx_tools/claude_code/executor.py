"""
Claude CLI launcher

Starts the Claude Code CLI in non-interactive mode as the subprocess behind a job.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from utils.async_jobs import ProcessLauncher

logger = logging.getLogger(__name__)


def find_claude_cli(configured: Optional[str] = None, home: Optional[Path] = None) -> str:
    """
    Resolve the Claude CLI executable.

    Order: an explicitly configured name or path, then the per-user local
    install at ``~/.claude/local/claude``, then ``claude`` on PATH.
    """
    if configured:
        return configured
    local_path = (home or Path.home()) / ".claude" / "local" / "claude"
    if local_path.exists():
        return str(local_path)
    return "claude"


@dataclass
class ClaudeCliConfig:
    """Configuration for Claude CLI execution"""

    cli_path: Optional[str] = None
    """Path to the CLI executable (default: resolved with find_claude_cli)"""

    skip_permissions: bool = True
    """Pass --dangerously-skip-permissions so the CLI never blocks on a prompt"""

    output_format: str = "text"
    """Value of --output-format"""

    additional_cli_args: List[str] = field(default_factory=list)
    """Additional CLI arguments appended after the standard ones"""

    def get_cli_path(self) -> str:
        """Get the CLI executable path"""
        return find_claude_cli(self.cli_path)


class ClaudeCodeLauncher(ProcessLauncher):
    """Runs one Claude CLI invocation per job"""

    display_name = "Claude CLI"

    def __init__(self, config: Optional[ClaudeCliConfig] = None):
        self.config = config or ClaudeCliConfig()

    def build_command(self, prompt: str) -> List[str]:
        """
        Build the CLI command.

        Args:
            prompt: The prompt to send to the CLI

        Returns:
            List of command arguments
        """
        cmd = [self.config.get_cli_path()]

        if self.config.skip_permissions:
            cmd.append("--dangerously-skip-permissions")

        cmd.extend(["-p", prompt, "--output-format", self.config.output_format])
        cmd.extend(self.config.additional_cli_args)
        return cmd

    def build_env(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Inherited environment with colored output switched off"""
        env = dict(os.environ if base is None else base)
        env["FORCE_COLOR"] = "0"
        env["NO_COLOR"] = "1"
        return env

    async def launch(self, instructions: str, cwd: str) -> asyncio.subprocess.Process:
        cmd = self.build_command(instructions)

        logger.debug(f"Executing: {' '.join(cmd[:2])} [prompt...] in {cwd}")
        logger.debug(f"Prompt length: {len(instructions)} chars")

        return await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=self.build_env(),
        )
