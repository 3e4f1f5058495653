"""
Async Jobs Framework

Runs delegated work as subprocesses in the background. Provides job creation,
bounded long-poll status queries, cancellation with escalation, and retention
of finished jobs.
"""

from .models import JobState, Job, JobSnapshot, JobSummary, CancelOutcome
from .exceptions import JobError, JobValidationError, JobNotFoundError
from .launcher import ProcessLauncher, signal_process_tree
from .retention import select_evictions
from .manager import JobManager
from .store import JobStore, InMemoryJobStore

__all__ = [
    "JobState",
    "Job",
    "JobSnapshot",
    "JobSummary",
    "CancelOutcome",
    "JobError",
    "JobValidationError",
    "JobNotFoundError",
    "ProcessLauncher",
    "signal_process_tree",
    "select_evictions",
    "JobManager",
    "JobStore",
    "InMemoryJobStore",
]
