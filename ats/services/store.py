"""Canonical in-memory store for the board state.

``CanonicalStore`` is the only writer of ``ATSState``.  Each ``apply_*``
method checks that its target still exists, builds a new state, swaps it in
with a single assignment and publishes it to subscribers.  A mutation that
no longer applies (job or candidate gone, duplicate id) is discarded and the
method returns ``False``.

``get_state()`` hands out deep copies; mutating them has no effect here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ats.models.base import merged
from ats.models.candidate import Candidate, CandidateUpdate
from ats.models.job import Job, JobUpdate
from ats.models.state import ATSState

logger = logging.getLogger(__name__)

Listener = Callable[[ATSState], None]


class CanonicalStore:
    """Single authority for the current ``ATSState``."""

    def __init__(self, initial: ATSState | None = None) -> None:
        self._state = (initial or ATSState()).with_valid_selection()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_state(self) -> ATSState:
        return self._state.model_copy(deep=True)

    def find_job(self, job_id: str | None) -> Job | None:
        job = self._state.find_job(job_id)
        return job.model_copy(deep=True) if job is not None else None

    def find_candidate(self, job_id: str, candidate_id: str) -> Candidate | None:
        job = self._state.find_job(job_id)
        if job is None:
            return None
        candidate = job.find_candidate(candidate_id)
        return candidate.model_copy(deep=True) if candidate is not None else None

    @property
    def selected_job_id(self) -> str | None:
        return self._state.selected_job_id

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for every published state; returns an unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _publish(self, state: ATSState, event: str, **details: Any) -> None:
        self._state = state.with_valid_selection()
        logger.debug("store_%s", event, extra=details)
        snapshot = self.get_state()
        for listener in list(self._listeners):
            listener(snapshot)

    def _discard(self, event: str, **details: Any) -> bool:
        logger.debug("store_%s_discarded", event, extra=details)
        return False

    def _with_job(self, job_id: str, job: Job | None, selected: str | None) -> ATSState:
        jobs: list[Job] = []
        for existing in self._state.jobs:
            if existing.id != job_id:
                jobs.append(existing)
            elif job is not None:
                jobs.append(job)
        return ATSState(jobs=jobs, selected_job_id=selected)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def replace(self, state: ATSState) -> None:
        """Swap in a whole new state (backend switch, import)."""
        self._publish(state.model_copy(deep=True), "replaced", jobs=len(state.jobs))

    def select_job(self, job_id: str) -> bool:
        if self._state.find_job(job_id) is None:
            return self._discard("job_selected", job_id=job_id)
        self._publish(
            self._state.model_copy(update={"selected_job_id": job_id}),
            "job_selected",
            job_id=job_id,
        )
        return True

    def apply_job_created(self, job: Job) -> bool:
        if self._state.find_job(job.id) is not None:
            return self._discard("job_created", job_id=job.id)
        state = ATSState(jobs=[job.model_copy(deep=True), *self._state.jobs], selected_job_id=job.id)
        self._publish(state, "job_created", job_id=job.id)
        return True

    def apply_job_updated(self, job_id: str, patch: JobUpdate) -> bool:
        job = self._state.find_job(job_id)
        if job is None:
            return self._discard("job_updated", job_id=job_id)
        updated = merged(job, patch.changes())
        self._publish(
            self._with_job(job_id, updated, self._state.selected_job_id),
            "job_updated",
            job_id=job_id,
        )
        return True

    def apply_job_deleted(self, job_id: str) -> bool:
        if self._state.find_job(job_id) is None:
            return self._discard("job_deleted", job_id=job_id)
        # Dropping the job drops every candidate it owns
        self._publish(
            self._with_job(job_id, None, self._state.selected_job_id),
            "job_deleted",
            job_id=job_id,
        )
        return True

    def apply_candidate_created(self, job_id: str, candidate: Candidate) -> bool:
        job = self._state.find_job(job_id)
        if job is None or job.find_candidate(candidate.id) is not None:
            return self._discard("candidate_created", job_id=job_id, candidate_id=candidate.id)
        updated = job.model_copy(
            update={"candidates": [*job.candidates, candidate.model_copy(deep=True)]}
        )
        self._publish(
            self._with_job(job_id, updated, self._state.selected_job_id),
            "candidate_created",
            job_id=job_id,
            candidate_id=candidate.id,
        )
        return True

    def apply_candidate_updated(
        self, job_id: str, candidate_id: str, patch: CandidateUpdate
    ) -> bool:
        job = self._state.find_job(job_id)
        if job is None or job.find_candidate(candidate_id) is None:
            return self._discard("candidate_updated", job_id=job_id, candidate_id=candidate_id)
        changes = patch.changes()
        candidates = [
            merged(c, changes) if c.id == candidate_id else c for c in job.candidates
        ]
        self._publish(
            self._with_job(
                job_id,
                job.model_copy(update={"candidates": candidates}),
                self._state.selected_job_id,
            ),
            "candidate_updated",
            job_id=job_id,
            candidate_id=candidate_id,
        )
        return True

    def apply_candidate_deleted(self, job_id: str, candidate_id: str) -> bool:
        job = self._state.find_job(job_id)
        if job is None or job.find_candidate(candidate_id) is None:
            return self._discard("candidate_deleted", job_id=job_id, candidate_id=candidate_id)
        candidates = [c for c in job.candidates if c.id != candidate_id]
        self._publish(
            self._with_job(
                job_id,
                job.model_copy(update={"candidates": candidates}),
                self._state.selected_job_id,
            ),
            "candidate_deleted",
            job_id=job_id,
            candidate_id=candidate_id,
        )
        return True
