"""The whole-board state document.

The same shape is used for the local snapshot, JSON export / import and the
``GET /api/v1/state`` response.
"""

from pydantic import Field

from ats.models.base import CamelModel
from ats.models.job import Job


class ATSState(CamelModel):
    """All jobs plus the currently selected job id."""

    jobs: list[Job] = Field(default_factory=list)
    selected_job_id: str | None = None

    def find_job(self, job_id: str | None) -> Job | None:
        if job_id is None:
            return None
        for job in self.jobs:
            if job.id == job_id:
                return job
        return None

    @property
    def selected_job(self) -> Job | None:
        return self.find_job(self.selected_job_id)

    def with_valid_selection(self) -> "ATSState":
        """Return a copy whose selection points at an existing job.

        An unknown or missing selection falls back to the first job, and to
        ``None`` when there are no jobs.
        """
        if self.find_job(self.selected_job_id) is not None:
            return self
        selected = self.jobs[0].id if self.jobs else None
        return self.model_copy(update={"selected_job_id": selected})
