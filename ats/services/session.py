"""Board session: CRUD helpers over the active adapter and the store.

Every helper validates its input first, awaits the active
``PersistenceAdapter`` and only then feeds the confirmed result into the
matching ``CanonicalStore.apply_*``.  A failure is logged, recorded as the
latest notice and re-raised; the store is left as it was.

Backend switches bump ``generation``.  A helper that was suspended on the
adapter when a switch happened drops its result instead of applying it to a
store that now mirrors another backend.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Mapping

from ats.core.config import Settings, settings
from ats.core.errors import ATSError, NotFoundFailure, ValidationFailure
from ats.models.attachment import Attachment, FileReference
from ats.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from ats.models.enums import AttachmentCategory, PersistMode, Stage
from ats.models.filters import BoardView, CandidateFilters, ViewPreset
from ats.models.job import Job, JobCreate, JobUpdate
from ats.models.state import ATSState
from ats.services.search import build_board, filter_candidates
from ats.services.store import CanonicalStore
from ats.storage.base import PersistenceAdapter
from ats.storage.local import LocalAdapter
from ats.storage.remote import RemoteAdapter
from ats.storage.snapshots import SnapshotFiles

logger = logging.getLogger(__name__)


class ATSSession:
    """Pairs the active persistence adapter with the canonical store."""

    def __init__(
        self,
        local: LocalAdapter,
        remote_factory: Callable[[], PersistenceAdapter] | None = None,
        wip_limits: Mapping[Stage, int | None] | None = None,
    ) -> None:
        self._local = local
        self._remote_factory = remote_factory
        self.adapter: PersistenceAdapter = local
        self.store = CanonicalStore(local.state)
        self.wip_limits = dict(wip_limits or {})
        self.generation = 0
        self.query = ""
        self.filters = CandidateFilters()
        self.blind = False
        self.notices: deque[str] = deque(maxlen=50)
        self.store.subscribe(self._persist)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @property
    def mode(self) -> PersistMode:
        return self.adapter.mode

    @property
    def can_switch(self) -> bool:
        return self._remote_factory is not None

    @property
    def local(self) -> LocalAdapter:
        return self._local

    @property
    def last_notice(self) -> str | None:
        return self.notices[-1] if self.notices else None

    def notify(self, message: str) -> str:
        self.notices.append(message)
        logger.info("notice", extra={"notice": message, "backend": self.mode.value})
        return message

    def fail(self, exc: ATSError) -> ATSError:
        """Log *exc*, record it as the latest notice and hand it back to raise."""
        logger.warning(
            "operation_failed",
            extra={"kind": exc.kind.value, "error_message": exc.message},
        )
        self.notices.append(exc.message)
        return exc

    def _persist(self, state: ATSState) -> None:
        self.adapter.persist_snapshot(state)

    def _is_stale(self, generation: int, action: str) -> bool:
        if generation != self.generation:
            logger.info("stale_result_discarded", extra={"action": action})
            return True
        return False

    def require_job(self, job_id: str) -> Job:
        job = self.store.find_job(job_id)
        if job is None:
            raise self.fail(NotFoundFailure(f"Job not found: {job_id}"))
        return job

    def require_candidate(self, job_id: str, candidate_id: str) -> Candidate:
        self.require_job(job_id)
        candidate = self.store.find_candidate(job_id, candidate_id)
        if candidate is None:
            raise self.fail(NotFoundFailure(f"Candidate not found: {candidate_id}"))
        return candidate

    # ------------------------------------------------------------------
    # Backend switching
    # ------------------------------------------------------------------

    async def switch_backend(self, mode: PersistMode) -> str:
        """Make *mode* the active backend and reload the store from it.

        Switching to Remote replaces the store wholesale with the server
        state.  If that load fails the previous backend stays active.
        """
        if mode == self.mode:
            return self.notify(f"Already using {mode.value} storage")

        if mode == PersistMode.local:
            self.generation += 1
            self.adapter = self._local
            self.store.replace(self._local.state)
            return self.notify("Switched to local storage")

        if self._remote_factory is None:
            raise self.fail(ValidationFailure("Remote backend is not configured"))

        remote = self._remote_factory()
        generation = self.generation
        try:
            state = await remote.load_all()
        except ATSError as exc:
            raise self.fail(exc)
        if self._is_stale(generation, "switch_backend"):
            return self.notify("Backend switch superseded")
        self.generation += 1
        self.adapter = remote
        self.store.replace(state)
        return self.notify("Switched to remote storage")

    async def reload(self) -> str:
        """Re-read the whole board from the active backend."""
        adapter, generation = self.adapter, self.generation
        try:
            state = await adapter.load_all()
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "reload"):
            self.store.replace(state)
        return self.notify("Board reloaded")

    def replace_state(self, state: ATSState, notice: str) -> str:
        self.store.replace(state)
        return self.notify(notice)

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def select_job(self, job_id: str) -> None:
        if not self.store.select_job(job_id):
            raise self.fail(NotFoundFailure(f"Job not found: {job_id}"))

    async def create_job(self, fields: JobCreate, attachment: Attachment | None = None) -> Job:
        if not fields.title:
            raise self.fail(ValidationFailure("Job title is required"))
        adapter, generation = self.adapter, self.generation
        try:
            job = await adapter.create_job(fields, attachment)
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "create_job"):
            self.store.apply_job_created(job)
        self.notify("Job created")
        return job

    async def update_job(
        self, job_id: str, patch: JobUpdate, notice: str = "Job updated"
    ) -> Job | None:
        if "title" in patch.changes() and not patch.title:
            raise self.fail(ValidationFailure("Job title is required"))
        self.require_job(job_id)
        adapter, generation = self.adapter, self.generation
        try:
            await adapter.update_job(job_id, patch)
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "update_job"):
            self.store.apply_job_updated(job_id, patch)
        self.notify(notice)
        return self.store.find_job(job_id)

    async def attach_job_description(self, job_id: str, attachment: Attachment) -> Job | None:
        self.require_job(job_id)
        reference = await self.upload_attachment(AttachmentCategory.job_description, attachment)
        return await self.update_job(job_id, JobUpdate(jd=reference), notice="JD attached")

    async def delete_job(self, job_id: str) -> None:
        self.require_job(job_id)
        adapter, generation = self.adapter, self.generation
        try:
            await adapter.delete_job(job_id)
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "delete_job"):
            self.store.apply_job_deleted(job_id)
        self.notify("Job deleted")

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    async def create_candidate(
        self,
        job_id: str,
        fields: CandidateCreate,
        attachment: Attachment | None = None,
        notice: str | None = "Candidate added",
    ) -> Candidate:
        self.require_job(job_id)
        adapter, generation = self.adapter, self.generation
        try:
            candidate = await adapter.create_candidate(job_id, fields, attachment)
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "create_candidate"):
            self.store.apply_candidate_created(job_id, candidate)
        if notice:
            self.notify(notice)
        return candidate

    async def update_candidate(
        self,
        job_id: str,
        candidate_id: str,
        patch: CandidateUpdate,
        notice: str | None = "Candidate updated",
    ) -> Candidate | None:
        self.require_candidate(job_id, candidate_id)
        adapter, generation = self.adapter, self.generation
        try:
            await adapter.update_candidate(job_id, candidate_id, patch)
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "update_candidate"):
            self.store.apply_candidate_updated(job_id, candidate_id, patch)
        if notice:
            self.notify(notice)
        return self.store.find_candidate(job_id, candidate_id)

    async def delete_candidate(self, job_id: str, candidate_id: str) -> None:
        self.require_candidate(job_id, candidate_id)
        adapter, generation = self.adapter, self.generation
        try:
            await adapter.delete_candidate(job_id, candidate_id)
        except ATSError as exc:
            raise self.fail(exc)
        if not self._is_stale(generation, "delete_candidate"):
            self.store.apply_candidate_deleted(job_id, candidate_id)
        self.notify("Candidate deleted")

    async def upload_attachment(
        self, category: AttachmentCategory, attachment: Attachment
    ) -> FileReference:
        try:
            return await self.adapter.upload_attachment(category, attachment)
        except ATSError as exc:
            raise self.fail(exc)

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    def set_query(self, query: str) -> None:
        self.query = query

    def set_filters(self, filters: CandidateFilters) -> None:
        self.filters = filters.model_copy(deep=True)

    def clear_filters(self) -> None:
        self.filters = CandidateFilters()

    def set_blind(self, blind: bool) -> None:
        """Hide or show candidate names on the board."""
        self.blind = blind

    def apply_preset(self, preset: ViewPreset) -> None:
        """Replace the current query and filters with the preset's."""
        self.query = preset.query
        self.filters = preset.filters.model_copy(deep=True)

    def selected_job(self) -> Job | None:
        return self.store.get_state().selected_job

    def filtered_candidates(self) -> list[Candidate]:
        job = self.selected_job()
        if job is None:
            return []
        return filter_candidates(job.candidates, self.query, self.filters)

    def board(self) -> BoardView:
        return build_board(
            self.selected_job(), self.query, self.filters, self.wip_limits, blind=self.blind
        )


def build_session(config: Settings = settings) -> ATSSession:
    """Wire the local adapter and, when configured, the remote factory."""
    local = LocalAdapter(SnapshotFiles(config.DATA_DIR))
    remote_factory = RemoteAdapter if config.remote_configured else None
    return ATSSession(local, remote_factory=remote_factory, wip_limits=config.wip_limits)
