"""
Registry backends for jobs.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from .models import Job

logger = logging.getLogger(__name__)


class JobStore(ABC):
    """Abstract base class for job registries."""

    @abstractmethod
    def add(self, job: Job) -> None:
        """Insert a new job."""
        pass

    @abstractmethod
    def get(self, job_id: str) -> Optional[Job]:
        """Look up a job, None if unknown."""
        pass

    @abstractmethod
    def jobs(self) -> List[Job]:
        """Snapshot of all jobs, oldest first."""
        pass

    @abstractmethod
    def evict(self, job_ids: Iterable[str]) -> int:
        """Hard-delete jobs, returning how many were removed."""
        pass


class InMemoryJobStore(JobStore):
    """
    In-memory registry keyed by job id.

    Not thread-safe: every call must come from the event loop thread, where
    each method runs to completion without yielding.
    """

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._logger = logger.getChild("memory_store")

    def add(self, job: Job) -> None:
        if job.id in self._jobs:
            raise ValueError(f"Job {job.id} already registered")
        self._jobs[job.id] = job
        self._logger.debug(f"Registered job {job.id}")

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def evict(self, job_ids: Iterable[str]) -> int:
        removed = 0
        for job_id in job_ids:
            if self._jobs.pop(job_id, None) is not None:
                removed += 1
        if removed:
            self._logger.info(f"Evicted {removed} finished jobs")
        return removed

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs
