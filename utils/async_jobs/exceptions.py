"""Exceptions raised by the job orchestrator."""

from typing import Optional


class JobError(Exception):
    """Base exception for all job orchestration errors."""

    def __init__(self, message: str, job_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.job_id = job_id


class JobValidationError(JobError, ValueError):
    """Raised when a request is missing or has malformed input."""


class JobNotFoundError(JobError):
    """Raised when a job id was never issued or has been evicted."""

    def __init__(self, job_id: str):
        super().__init__(
            f'No job "{job_id}". Use claude_code_list to see all jobs.', job_id
        )
