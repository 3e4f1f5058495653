"""
Retention policy for finished jobs.
"""

from typing import Iterable, List

from .models import Job


def select_evictions(jobs: Iterable[Job], cap: int) -> List[str]:
    """
    Pick the finished jobs to drop so that at most ``cap`` remain.

    Running jobs are never candidates. The oldest by completion time go
    first; jobs without a completion time sort before all others and ties
    keep registry order.

    Args:
        jobs: Current registry contents in insertion order
        cap: Number of finished jobs to keep

    Returns:
        Ids of the jobs to evict, oldest first
    """
    finished = [job for job in jobs if job.state.is_terminal]
    excess = len(finished) - max(cap, 0)
    if excess <= 0:
        return []

    finished.sort(key=lambda job: job.completed_at or 0.0)
    return [job.id for job in finished[:excess]]
