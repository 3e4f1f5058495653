"""
Process launchers used by the job manager.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import psutil

logger = logging.getLogger(__name__)


def signal_process_tree(pid: int, force: bool = False) -> int:
    """
    Send SIGTERM (or SIGKILL when ``force``) to a process and its descendants.

    Processes that are already gone are skipped.

    Args:
        pid: Root process id
        force: Kill instead of terminate

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return 0

    try:
        targets = root.children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        targets = []
    targets.append(root)

    signalled = 0
    for proc in targets:
        try:
            if force:
                proc.kill()
            else:
                proc.terminate()
            signalled += 1
        except psutil.NoSuchProcess:
            continue
    return signalled


class ProcessLauncher(ABC):
    """
    Starts the subprocess behind a job and knows how to stop it.

    Concrete launchers only decide what gets executed; signalling is shared.
    """

    display_name = "process"

    @abstractmethod
    async def launch(self, instructions: str, cwd: str) -> asyncio.subprocess.Process:
        """
        Start a subprocess for the given instructions.

        The returned process must have ``stdout`` and ``stderr`` piped.

        Raises:
            OSError: If the process cannot be started
        """
        pass

    def terminate(self, process: asyncio.subprocess.Process) -> None:
        """Ask the process tree to exit."""
        if process.returncode is not None:
            return
        try:
            signal_process_tree(process.pid)
        except psutil.Error as e:
            logger.warning(f"Error terminating process {process.pid}: {e}")

    def kill(self, process: asyncio.subprocess.Process) -> None:
        """Force the process tree down. Errors are ignored."""
        if process.returncode is not None:
            return
        try:
            signal_process_tree(process.pid, force=True)
        except psutil.Error as e:
            logger.debug(f"Forced kill of process {process.pid} failed: {e}")
