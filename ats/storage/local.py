"""Local persistence backend.

Keeps the board as a single ``ATSState`` document snapshotted to disk after
every mutation.  Operations never fail for transport reasons.  Attachments
stay in process memory and are addressed by ``blob:ats/<token>`` URLs that
are only valid for the current process.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ats.core.constants import (
    LOCAL_BLOB_PREFIX,
    SEED_CANDIDATES,
    SEED_JOB,
    STATE_STORAGE_KEY,
)
from ats.core.errors import ParseFailure
from ats.models.attachment import Attachment, FileReference
from ats.models.base import merged
from ats.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from ats.models.enums import AttachmentCategory, PersistMode
from ats.models.job import Job, JobCreate, JobUpdate
from ats.models.state import ATSState
from ats.storage.base import PersistenceAdapter
from ats.storage.mappers import (
    dump_state_document,
    new_candidate,
    new_job,
    parse_state_document,
)
from ats.storage.snapshots import SnapshotFiles

logger = logging.getLogger(__name__)


def new_local_id() -> str:
    """Short random id for locally created records."""
    return uuid4().hex[:8]


def seed_state() -> ATSState:
    """Demo board used when no readable local snapshot exists."""
    job = new_job(new_local_id(), JobCreate(**SEED_JOB))
    job.candidates = [
        new_candidate(new_local_id(), CandidateCreate(**fields)) for fields in SEED_CANDIDATES
    ]
    return ATSState(jobs=[job], selected_job_id=job.id)


class LocalAdapter(PersistenceAdapter):
    """Always-available backend backed by a JSON snapshot file."""

    mode = PersistMode.local

    def __init__(self, snapshots: SnapshotFiles) -> None:
        self._snapshots = snapshots
        self._blobs: dict[str, Attachment] = {}
        self._state = self.load_snapshot()

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------

    def load_snapshot(self) -> ATSState:
        """Read the snapshot synchronously, falling back to the seed board."""
        raw = self._snapshots.read(STATE_STORAGE_KEY)
        if raw is None:
            logger.info("local_snapshot_missing_using_seed")
            return seed_state()
        try:
            return parse_state_document(raw)
        except ParseFailure as exc:
            logger.warning(
                "local_snapshot_unreadable_using_seed",
                extra={"error_message": exc.message},
            )
            return seed_state()

    def _save(self) -> None:
        self._snapshots.write(STATE_STORAGE_KEY, dump_state_document(self._state))

    def persist_snapshot(self, state: ATSState) -> None:
        self._state = state.model_copy(deep=True)
        self._save()

    @property
    def state(self) -> ATSState:
        return self._state.model_copy(deep=True)

    def _replace_job(self, job_id: str, job: Job | None) -> None:
        jobs: list[Job] = []
        for existing in self._state.jobs:
            if existing.id != job_id:
                jobs.append(existing)
            elif job is not None:
                jobs.append(job)
        self._state = ATSState(
            jobs=jobs, selected_job_id=self._state.selected_job_id
        ).with_valid_selection()
        self._save()

    # ------------------------------------------------------------------
    # PersistenceAdapter
    # ------------------------------------------------------------------

    async def load_all(self) -> ATSState:
        return self.state

    async def create_job(self, fields: JobCreate, attachment: Attachment | None = None) -> Job:
        jd = None
        if attachment is not None:
            jd = await self.upload_attachment(AttachmentCategory.job_description, attachment)
        job = new_job(new_local_id(), fields, jd)
        self._state = ATSState(jobs=[job, *self._state.jobs], selected_job_id=job.id)
        self._save()
        return job.model_copy(deep=True)

    async def update_job(self, job_id: str, patch: JobUpdate) -> None:
        job = self._state.find_job(job_id)
        if job is None:
            return
        self._replace_job(job_id, merged(job, patch.changes()))

    async def delete_job(self, job_id: str) -> None:
        # Candidates live inside the job document, so they go with it
        self._replace_job(job_id, None)

    async def create_candidate(
        self,
        job_id: str,
        fields: CandidateCreate,
        attachment: Attachment | None = None,
    ) -> Candidate:
        resume = None
        if attachment is not None:
            resume = await self.upload_attachment(AttachmentCategory.resume, attachment)
        candidate = new_candidate(new_local_id(), fields, resume)
        job = self._state.find_job(job_id)
        if job is not None:
            self._replace_job(
                job_id, job.model_copy(update={"candidates": [*job.candidates, candidate]})
            )
        return candidate.model_copy(deep=True)

    async def update_candidate(
        self, job_id: str, candidate_id: str, patch: CandidateUpdate
    ) -> None:
        job = self._state.find_job(job_id)
        if job is None or job.find_candidate(candidate_id) is None:
            return
        changes = patch.changes()
        candidates = [
            merged(c, changes) if c.id == candidate_id else c for c in job.candidates
        ]
        self._replace_job(job_id, job.model_copy(update={"candidates": candidates}))

    async def delete_candidate(self, job_id: str, candidate_id: str) -> None:
        job = self._state.find_job(job_id)
        if job is None:
            return
        candidates = [c for c in job.candidates if c.id != candidate_id]
        self._replace_job(job_id, job.model_copy(update={"candidates": candidates}))

    async def upload_attachment(
        self, category: AttachmentCategory, attachment: Attachment
    ) -> FileReference:
        token = uuid4().hex
        self._blobs[token] = attachment
        logger.debug(
            "local_attachment_stored",
            extra={"category": category.value, "filename": attachment.filename},
        )
        return FileReference(name=attachment.filename, url=f"{LOCAL_BLOB_PREFIX}{token}")

    def read_attachment(self, token: str) -> Attachment | None:
        """Return an attachment stored earlier in this process."""
        return self._blobs.get(token.removeprefix(LOCAL_BLOB_PREFIX))
