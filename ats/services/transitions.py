"""Stage transition controller.

Turns a drop command ``(candidate_id, target)`` into a stage update.  The
target is either a stage name (dropped on a column) or another candidate's
id (dropped on a card, meaning "that card's column").  Any stage may move to
any other stage.  WIP limits are advisory: an over-limit column is reported
on the result but never blocks the move.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ats.models.candidate import CandidateUpdate, is_stage, normalize_stage
from ats.models.enums import Stage
from ats.models.filters import BoardView
from ats.models.job import Job
from ats.models.responses import TransitionResult
from ats.services.search import build_board
from ats.services.session import ATSSession

logger = logging.getLogger(__name__)


def resolve_target_stage(job: Job, target: str | Stage) -> Stage | None:
    """Stage named by a drop target, or ``None`` when it names nothing."""
    if is_stage(target):
        return Stage(target)
    other = job.find_candidate(str(target))
    if other is None:
        return None
    return normalize_stage(other.stage)


def evaluate_wip(
    board: BoardView,
    limits: Mapping[Stage, int | None] | None = None,
) -> list[Stage]:
    """Stages whose card count exceeds their limit, in column order.

    Without explicit *limits* the flags computed on the board are used.
    """
    if limits is None:
        return board.over_limit_stages
    over: list[Stage] = []
    for column in board.columns:
        limit = None if column.stage.is_terminal else limits.get(column.stage)
        if limit is not None and column.count > limit:
            over.append(column.stage)
    return over


class StageTransitionController:
    """Validates and applies stage reassignments for one session."""

    def __init__(self, session: ATSSession) -> None:
        self.session = session

    async def move(self, job_id: str, candidate_id: str, target: str | Stage) -> TransitionResult:
        """Move *candidate_id* to the stage resolved from *target*.

        Unresolvable candidates or targets are dropped silently; a move to the
        current stage is a no-op.  A move whose result is discarded because the
        backend switched mid-call comes back ``superseded`` with no notice.
        Adapter failures propagate after the session has recorded the notice.
        """
        job = self.session.store.find_job(job_id)
        candidate = job.find_candidate(candidate_id) if job is not None else None
        target_stage = resolve_target_stage(job, target) if job is not None else None
        if candidate is None or target_stage is None:
            logger.debug(
                "transition_dropped",
                extra={"job_id": job_id, "candidate_id": candidate_id, "target": str(target)},
            )
            return TransitionResult(moved=False, candidate_id=candidate_id, reason="unresolved")

        current = normalize_stage(candidate.stage)
        if current == target_stage:
            return TransitionResult(
                moved=False,
                candidate_id=candidate_id,
                reason="same_stage",
                from_stage=current,
                to_stage=target_stage,
            )

        generation = self.session.generation
        await self.session.update_candidate(
            job_id,
            candidate_id,
            CandidateUpdate(stage=target_stage),
            notice=None,
        )
        if self.session.generation != generation:
            # the store holds the reloaded board, not this move
            return TransitionResult(
                moved=False,
                candidate_id=candidate_id,
                reason="superseded",
                from_stage=current,
                to_stage=target_stage,
            )
        notice = self.session.notify(f"Moved to {target_stage.value}")
        board = build_board(
            self.session.store.find_job(job_id),
            self.session.query,
            self.session.filters,
            self.session.wip_limits,
        )
        over_limit = evaluate_wip(board)
        if over_limit:
            logger.info(
                "wip_limit_exceeded",
                extra={"stages": [s.value for s in over_limit], "job_id": job_id},
            )
        return TransitionResult(
            moved=True,
            candidate_id=candidate_id,
            reason="moved",
            from_stage=current,
            to_stage=target_stage,
            notice=notice,
            over_limit=over_limit,
        )
