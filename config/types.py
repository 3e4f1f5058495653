from pydantic import BaseModel, Field


class JobSettings(BaseModel):
    """Tunables of the asynchronous job orchestrator"""

    max_completed_jobs: int = Field(default=50, ge=0, description="Finished jobs kept before eviction")
    max_wait_seconds: float = Field(default=25.0, ge=0, le=25.0, description="Upper bound of a status long-poll")
    kill_delay_seconds: float = Field(default=5.0, ge=0, description="Delay between SIGTERM and SIGKILL on cancel")
    output_tail_chars: int = Field(default=3000, ge=1, description="Stdout tail shown while a job runs")
    error_tail_chars: int = Field(default=2000, ge=1, description="Stderr tail shown for failed jobs")
    default_work_folder: str = Field(description="Working directory used when none is given")


class NotepadSettings(BaseModel):
    """Limits of the session notepad"""

    priority_max_chars: int = Field(default=500, ge=1, description="Maximum length of the priority section")
    working_retention_days: int = Field(default=7, ge=1, description="Age after which working entries are dropped")
