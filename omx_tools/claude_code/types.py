"""
Response types for the claude_code tools.
"""

from pydantic import BaseModel, ConfigDict, Field

from utils.async_jobs import JobState


class JobStartedResponse(BaseModel):
    """Reply to a claude_code call: the job id to poll."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    status: JobState = JobState.RUNNING
    message: str

    @classmethod
    def for_job(cls, job_id: str) -> "JobStartedResponse":
        return cls(
            job_id=job_id,
            message=(
                f'Job started. Call claude_code_status(jobId: "{job_id}") '
                "to wait for results."
            ),
        )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
