"""Persistence adapter contract.

Both backends expose the same async surface.  Failures are raised as
``TransportFailure`` / ``AttachmentFailure``; callers never branch on which
backend is active.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ats.models.attachment import Attachment, FileReference
from ats.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from ats.models.enums import AttachmentCategory, PersistMode
from ats.models.job import Job, JobCreate, JobUpdate
from ats.models.state import ATSState


class PersistenceAdapter(ABC):
    """CRUD for jobs / candidates plus attachment upload."""

    mode: PersistMode

    @abstractmethod
    async def load_all(self) -> ATSState:
        """Return the full state held by the backend."""

    @abstractmethod
    async def create_job(self, fields: JobCreate, attachment: Attachment | None = None) -> Job:
        ...

    @abstractmethod
    async def update_job(self, job_id: str, patch: JobUpdate) -> None:
        ...

    @abstractmethod
    async def delete_job(self, job_id: str) -> None:
        """Delete a job and, with it, all of its candidates."""

    @abstractmethod
    async def create_candidate(
        self,
        job_id: str,
        fields: CandidateCreate,
        attachment: Attachment | None = None,
    ) -> Candidate:
        ...

    @abstractmethod
    async def update_candidate(
        self, job_id: str, candidate_id: str, patch: CandidateUpdate
    ) -> None:
        ...

    @abstractmethod
    async def delete_candidate(self, job_id: str, candidate_id: str) -> None:
        ...

    @abstractmethod
    async def upload_attachment(
        self, category: AttachmentCategory, attachment: Attachment
    ) -> FileReference:
        ...

    def persist_snapshot(self, state: ATSState) -> None:
        """Persist a whole-state snapshot after a non-CRUD change.

        Only meaningful for backends that keep a client-side document; the
        remote backend owns its state server side and ignores this.
        """
