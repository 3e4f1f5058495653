"""Tests for the retention policy."""

from utils.async_jobs import Job, JobState, select_evictions


def make_job(job_id, state=JobState.COMPLETED, completed_at=None):
    job = Job(id=job_id, work_folder="/work", prompt_preview="p")
    if state is not JobState.RUNNING:
        job.finish(state)
        job.completed_at = completed_at
    return job


def test_nothing_evicted_at_or_below_cap():
    jobs = [make_job(str(i), completed_at=float(i)) for i in range(3)]
    assert select_evictions(jobs, 3) == []
    assert select_evictions([], 0) == []


def test_oldest_completed_evicted_first():
    jobs = [
        make_job("new", completed_at=30.0),
        make_job("old", completed_at=10.0),
        make_job("mid", completed_at=20.0),
    ]
    assert select_evictions(jobs, 1) == ["old", "mid"]


def test_running_jobs_never_selected():
    jobs = [make_job(f"r{i}", state=JobState.RUNNING) for i in range(5)]
    jobs.append(make_job("done", completed_at=1.0))

    assert select_evictions(jobs, 0) == ["done"]
    assert select_evictions(jobs, 1) == []


def test_all_terminal_states_count():
    jobs = [
        make_job("c", JobState.COMPLETED, 1.0),
        make_job("f", JobState.FAILED, 2.0),
        make_job("x", JobState.CANCELLED, 3.0),
    ]
    assert select_evictions(jobs, 2) == ["c"]


def test_missing_completion_time_sorts_first():
    jobs = [make_job("a", completed_at=5.0), make_job("b", completed_at=None)]
    assert select_evictions(jobs, 1) == ["b"]


def test_ties_keep_registry_order():
    jobs = [make_job(name, completed_at=7.0) for name in ("first", "second", "third")]
    assert select_evictions(jobs, 1) == ["first", "second"]


def test_exactly_cap_remain():
    jobs = [make_job(str(i), completed_at=float(i)) for i in range(60)]
    evicted = select_evictions(jobs, 50)
    assert len(evicted) == 10
    assert evicted == [str(i) for i in range(10)]
