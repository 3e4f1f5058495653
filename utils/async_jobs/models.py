"""
Data models for the async jobs framework.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class JobState(str, Enum):
    """Possible states for a job."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """True for states a job never leaves."""
        return self is not JobState.RUNNING


@dataclass
class Job:
    """One unit of delegated work and the subprocess that carries it out."""
    id: str
    work_folder: str
    prompt_preview: str
    state: JobState = JobState.RUNNING
    stdout: str = ""
    stderr: str = ""
    created_at: float = field(default_factory=time.time)
    completed_at: Optional[float] = None
    exit_code: Optional[int] = None
    process: Optional[asyncio.subprocess.Process] = field(default=None, repr=False)
    _finished: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def is_running(self) -> bool:
        return self.state is JobState.RUNNING

    def elapsed_seconds(self, now: Optional[float] = None) -> int:
        """Whole seconds from creation to completion, or to now while running."""
        end = self.completed_at
        if end is None:
            end = time.time() if now is None else now
        return int(max(0.0, end - self.created_at) + 0.5)

    def append_output(self, stream: str, text: str) -> None:
        """Append decoded output; ignored once the job is terminal."""
        if not self.is_running or not text:
            return
        if stream == "stdout":
            self.stdout += text
        else:
            self.stderr += text

    def finish(self, state: JobState, exit_code: Optional[int] = None) -> bool:
        """Move a running job into a terminal state.

        Returns False (and changes nothing) when the job is already terminal.
        """
        if not state.is_terminal:
            raise ValueError(f"{state.value} is not a terminal state")
        if not self.is_running:
            return False
        self.state = state
        self.exit_code = exit_code
        self.completed_at = time.time()
        self.process = None
        self._finished.set()
        return True

    async def wait_finished(self) -> None:
        """Block until the job reaches a terminal state."""
        await self._finished.wait()


class JobSnapshot(BaseModel):
    """Status of a job as returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    status: JobState
    elapsed_seconds: int = Field(alias="elapsedSeconds")
    work_folder: str = Field(alias="workFolder")
    exit_code: Optional[int] = Field(default=None, alias="exitCode")
    output_tail: Optional[str] = Field(default=None, alias="outputTail")
    hint: Optional[str] = None
    output: Optional[str] = None
    error: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class JobSummary(BaseModel):
    """Lightweight listing entry for a job."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    status: JobState
    elapsed_seconds: int = Field(alias="elapsedSeconds")
    prompt_preview: str = Field(alias="promptPreview")
    work_folder: str = Field(alias="workFolder")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CancelOutcome(BaseModel):
    """Result of a cancellation request."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    status: JobState
    cancelled: bool
    message: str

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
