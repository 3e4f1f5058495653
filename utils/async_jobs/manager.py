"""
Job manager coordinating asynchronous subprocess jobs.
"""

import asyncio
import codecs
import json
import logging
import math
import os
import time
import uuid
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .exceptions import JobNotFoundError, JobValidationError
from .launcher import ProcessLauncher
from .models import CancelOutcome, Job, JobSnapshot, JobState, JobSummary
from .retention import select_evictions
from .store import InMemoryJobStore, JobStore

logger = logging.getLogger(__name__)


def _log_with_context(log_level: int, msg: str, context: Dict[str, Any] = None) -> None:
    """Helper function for structured logging with context

    Args:
        log_level: The logging level to use
        msg: The message to log
        context: Optional dictionary of contextual information
    """
    if context is None:
        context = {}

    # Add timestamp in ISO format using timezone-aware UTC
    context["timestamp"] = datetime.now(UTC).isoformat()

    structured_msg = f"{msg} | Context: {json.dumps(context, default=str)}"
    logger.log(log_level, structured_msg)


class JobManager:
    """
    Registry and state machine for asynchronous subprocess jobs.

    All methods must be called from the event loop that owns the jobs. Each
    registry mutation happens between two awaits, so no lock is needed.

    Example:
        manager = JobManager(launcher)
        job_id = await manager.create_job("summarize the repo", "/work/repo")

        # Long-poll for up to 25 seconds
        snapshot = await manager.get_status(job_id, wait_seconds=25)

        # Abort
        manager.cancel_job(job_id)
    """

    READ_CHUNK_SIZE = 4096
    # Status calls must return before the MCP client times out
    MAX_WAIT_CEILING = 25.0
    PROMPT_PREVIEW_CHARS = 200
    STATUS_FILTERS = ("all",) + tuple(state.value for state in JobState)

    def __init__(
        self,
        launcher: ProcessLauncher,
        job_store: Optional[JobStore] = None,
        max_completed_jobs: int = 50,
        max_wait_seconds: float = 25.0,
        kill_delay_seconds: float = 5.0,
        output_tail_chars: int = 3000,
        error_tail_chars: int = 2000,
        default_work_folder: Optional[str] = None,
        running_hint: str = "Still running. Call claude_code_status again.",
    ):
        """
        Initialize the job manager.

        Args:
            launcher: Starts and signals the subprocess behind each job
            job_store: Registry backend, in-memory by default
            max_completed_jobs: Finished jobs kept before the oldest are evicted
            max_wait_seconds: Upper bound for a single status long-poll, capped at
                MAX_WAIT_CEILING
            kill_delay_seconds: Delay between the graceful and forced signal on cancel
            output_tail_chars: Stdout characters shown while a job is running
            error_tail_chars: Stderr characters shown for a failed job
            default_work_folder: Working directory for jobs that do not name a valid one
            running_hint: Hint attached to snapshots of running jobs
        """
        self._launcher = launcher
        self._store = job_store or InMemoryJobStore()
        self._max_completed_jobs = max_completed_jobs
        self._max_wait_seconds = min(max_wait_seconds, self.MAX_WAIT_CEILING)
        self._kill_delay_seconds = kill_delay_seconds
        self._output_tail_chars = output_tail_chars
        self._error_tail_chars = error_tail_chars
        self._default_work_folder = default_work_folder or str(Path.home())
        self._running_hint = running_hint
        self._issued_ids: Set[str] = set()
        self._tasks: Dict[str, asyncio.Task] = {}
        self._kill_timers: Dict[str, asyncio.TimerHandle] = {}

    @classmethod
    def from_settings(cls, launcher: ProcessLauncher, settings, **kwargs) -> "JobManager":
        """Build a manager from a ``config.JobSettings`` instance."""
        return cls(
            launcher,
            max_completed_jobs=settings.max_completed_jobs,
            max_wait_seconds=settings.max_wait_seconds,
            kill_delay_seconds=settings.kill_delay_seconds,
            output_tail_chars=settings.output_tail_chars,
            error_tail_chars=settings.error_tail_chars,
            default_work_folder=settings.default_work_folder,
            **kwargs,
        )

    async def create_job(self, instructions: str, work_folder: Optional[str] = None) -> str:
        """
        Start a job and return its id without waiting for it to finish.

        A spawn failure does not raise: the job is registered as failed with
        the reason in its stderr, and the caller finds out on the next status
        query.

        Args:
            instructions: Text handed to the launched process
            work_folder: Absolute working directory, the default is used otherwise

        Returns:
            The new job id

        Raises:
            JobValidationError: If instructions are missing
        """
        if not isinstance(instructions, str) or not instructions:
            raise JobValidationError("prompt is required.")

        cwd = self._resolve_work_folder(work_folder)
        job = Job(
            id=self._allocate_id(),
            work_folder=cwd,
            prompt_preview=instructions[: self.PROMPT_PREVIEW_CHARS],
        )

        self._store.add(job)
        _log_with_context(
            logging.INFO,
            "Starting job",
            {"job_id": job.id, "work_folder": cwd},
        )

        launch = asyncio.ensure_future(self._launcher.launch(instructions, cwd))
        try:
            process = await asyncio.shield(launch)
        except asyncio.CancelledError:
            # The caller went away mid-launch; the job must still end
            _log_with_context(
                logging.WARNING,
                "Job creation interrupted while launching",
                {"job_id": job.id},
            )
            job.stderr = f"Launch of {self._launcher.display_name} was interrupted."
            self._finish(job, JobState.FAILED)
            launch.add_done_callback(self._discard_launch)
            raise
        except (OSError, ValueError) as e:
            _log_with_context(
                logging.WARNING,
                "Failed to spawn job process",
                {"job_id": job.id, "error": str(e)},
            )
            job.stderr = f"Failed to spawn {self._launcher.display_name}: {e}"
            self._finish(job, JobState.FAILED)
            return job.id

        if job.is_running:
            job.process = process
        else:
            # Cancelled while the process was starting
            self._launcher.terminate(process)
            self._schedule_kill(job.id, process)

        task = asyncio.create_task(self._supervise(job, process))
        self._tasks[job.id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job.id, None))

        _log_with_context(
            logging.INFO,
            "Started job",
            {"job_id": job.id, "pid": process.pid},
        )
        return job.id

    async def get_status(self, job_id: str, wait_seconds: Any = None) -> JobSnapshot:
        """
        Report a job, waiting up to ``wait_seconds`` for it to finish.

        The wait is clamped to ``[0, max_wait_seconds]`` and never raises when
        it runs out; the snapshot then shows the job still running.

        Args:
            job_id: Id returned by create_job
            wait_seconds: Requested wait, None means the maximum

        Returns:
            Snapshot of the job at return time

        Raises:
            JobNotFoundError: If the id is unknown or was evicted
        """
        job = self._require(job_id)
        wait = self._clamp_wait(wait_seconds)

        if job.is_running and wait > 0:
            try:
                await asyncio.wait_for(job.wait_finished(), timeout=wait)
            except asyncio.TimeoutError:
                _log_with_context(
                    logging.DEBUG,
                    "Status wait elapsed with job still running",
                    {"job_id": job_id, "wait_seconds": wait},
                )

        return self._snapshot(job)

    def cancel_job(self, job_id: str) -> CancelOutcome:
        """
        Cancel a running job.

        The job is marked cancelled before this returns. The process gets a
        graceful signal now and a forced one after the kill delay if it is
        still alive. Cancelling a finished job changes nothing.

        Raises:
            JobNotFoundError: If the id is unknown or was evicted
        """
        job = self._require(job_id)

        if not job.is_running:
            return CancelOutcome(
                job_id=job_id,
                status=job.state,
                cancelled=False,
                message=f"Job {job_id} already {job.state.value}.",
            )

        process = job.process
        _log_with_context(
            logging.INFO,
            "Cancelling job",
            {"job_id": job_id, "pid": process.pid if process else None},
        )
        if process is not None:
            self._launcher.terminate(process)
            self._schedule_kill(job_id, process)
        self._finish(job, JobState.CANCELLED)

        return CancelOutcome(
            job_id=job_id,
            status=JobState.CANCELLED,
            cancelled=True,
            message=f"Job {job_id} cancelled.",
        )

    def list_jobs(self, status_filter: Optional[str] = None) -> List[JobSummary]:
        """
        List jobs newest first, optionally only those in one state.

        Raises:
            JobValidationError: If the filter is not a known status
        """
        state = self._parse_filter(status_filter)
        now = time.time()

        return [
            JobSummary(
                job_id=job.id,
                status=job.state,
                elapsed_seconds=job.elapsed_seconds(now),
                prompt_preview=job.prompt_preview,
                work_folder=job.work_folder,
            )
            for job in reversed(self._store.jobs())
            if state is None or job.state is state
        ]

    def get_stats(self) -> Dict[str, int]:
        """Count jobs per state."""
        jobs = self._store.jobs()
        stats = {"total_jobs": len(jobs)}
        for state in JobState:
            stats[f"{state.value}_jobs"] = sum(1 for job in jobs if job.state is state)
        return stats

    async def shutdown(self) -> None:
        """Kill every running job and stop all background work."""
        logger.info("Shutting down job manager...")

        for job in self._store.jobs():
            if job.is_running:
                if job.process is not None:
                    self._launcher.kill(job.process)
                self._finish(job, JobState.CANCELLED)

        for handle in self._kill_timers.values():
            handle.cancel()
        self._kill_timers.clear()

        tasks = list(self._tasks.values())
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=self._kill_delay_seconds or None)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        logger.info("Job manager shutdown complete")

    def _require(self, job_id: str) -> Job:
        if not job_id or not isinstance(job_id, str):
            raise JobValidationError("jobId is required.")
        job = self._store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _allocate_id(self) -> str:
        while True:
            job_id = uuid.uuid4().hex[:8]
            if job_id not in self._issued_ids:
                self._issued_ids.add(job_id)
                return job_id

    def _resolve_work_folder(self, work_folder: Any) -> str:
        if isinstance(work_folder, str) and os.path.isabs(work_folder):
            return work_folder
        return self._default_work_folder

    def _clamp_wait(self, wait_seconds: Any) -> float:
        if wait_seconds is None:
            return self._max_wait_seconds
        try:
            value = float(wait_seconds)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(value):
            return 0.0
        return min(max(0.0, value), self._max_wait_seconds)

    def _parse_filter(self, status_filter: Optional[str]) -> Optional[JobState]:
        if status_filter is None or status_filter == "all":
            return None
        try:
            return JobState(status_filter)
        except ValueError:
            raise JobValidationError(
                f"status must be one of: {', '.join(self.STATUS_FILTERS)}."
            ) from None

    def _tail_output(self, stdout: str) -> str:
        tail = stdout[-self._output_tail_chars:]
        if len(tail) < len(stdout):
            return f"...({len(stdout)} chars)...\n{tail}"
        return tail or "(no output yet)"

    def _snapshot(self, job: Job) -> JobSnapshot:
        fields: Dict[str, Any] = {
            "job_id": job.id,
            "status": job.state,
            "elapsed_seconds": job.elapsed_seconds(),
            "work_folder": job.work_folder,
            "exit_code": job.exit_code,
        }

        if job.is_running:
            fields["output_tail"] = self._tail_output(job.stdout)
            fields["hint"] = self._running_hint
        else:
            fields["output"] = job.stdout or "(no output)"

        if job.state is JobState.FAILED and job.stderr:
            fields["error"] = job.stderr[-self._error_tail_chars:]

        return JobSnapshot(**fields)

    def _finish(self, job: Job, state: JobState, exit_code: Optional[int] = None) -> bool:
        """Apply a terminal transition and run retention. False if already terminal."""
        if not job.finish(state, exit_code):
            return False

        _log_with_context(
            logging.INFO,
            "Job finished",
            {
                "job_id": job.id,
                "status": state.value,
                "exit_code": exit_code,
                "stdout_length": len(job.stdout),
                "stderr_length": len(job.stderr),
            },
        )
        self._prune()
        return True

    def _prune(self) -> None:
        evictions = select_evictions(self._store.jobs(), self._max_completed_jobs)
        if evictions:
            self._store.evict(evictions)

    def _schedule_kill(self, job_id: str, process: asyncio.subprocess.Process) -> None:
        loop = asyncio.get_running_loop()
        self._kill_timers[job_id] = loop.call_later(
            self._kill_delay_seconds, self._force_kill, job_id, process
        )

    def _discard_launch(self, launch: asyncio.Future) -> None:
        """Kill a process whose job was abandoned before the launch finished."""
        if launch.cancelled() or launch.exception() is not None:
            return
        process = launch.result()
        logger.info(f"Killing process {process.pid} of an abandoned launch")
        self._launcher.kill(process)

    def _force_kill(self, job_id: str, process: asyncio.subprocess.Process) -> None:
        self._kill_timers.pop(job_id, None)
        if process.returncode is not None:
            return
        _log_with_context(
            logging.INFO,
            "Process ignored termination, killing",
            {"job_id": job_id, "pid": process.pid},
        )
        self._launcher.kill(process)

    async def _pump(self, job: Job, stream: Optional[asyncio.StreamReader], name: str) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(self.READ_CHUNK_SIZE)
            if not chunk:
                break
            job.append_output(name, decoder.decode(chunk))
        job.append_output(name, decoder.decode(b"", final=True))

    async def _supervise(self, job: Job, process: asyncio.subprocess.Process) -> None:
        """Collect output as it arrives and record the exit of the process."""
        try:
            await asyncio.gather(
                self._pump(job, process.stdout, "stdout"),
                self._pump(job, process.stderr, "stderr"),
            )
            exit_code = await process.wait()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _log_with_context(
                logging.ERROR,
                "Error supervising job process",
                {"job_id": job.id, "error": str(e)},
            )
            self._launcher.kill(process)
            job.append_output("stderr", f"\nProcess error: {e}")
            self._finish(job, JobState.FAILED)
            return

        if exit_code is not None and exit_code < 0:
            # Killed by a signal: there is no exit code to report
            _log_with_context(
                logging.INFO,
                "Job process terminated by signal",
                {"job_id": job.id, "signal": -exit_code},
            )
            exit_code = None

        state = JobState.COMPLETED if exit_code == 0 else JobState.FAILED
        if not self._finish(job, state, exit_code):
            _log_with_context(
                logging.DEBUG,
                "Process exited after job was already finished",
                {"job_id": job.id, "status": job.state.value, "exit_code": exit_code},
            )
