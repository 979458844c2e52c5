"""Candidate endpoints, nested under a job.

POST   /jobs/{job_id}/candidates                      -- add a candidate
PATCH  /jobs/{job_id}/candidates/{candidate_id}       -- edit a candidate
DELETE /jobs/{job_id}/candidates/{candidate_id}       -- remove a candidate
POST   /jobs/{job_id}/candidates/{candidate_id}/move  -- drop onto a column or card
POST   /jobs/{job_id}/candidates/{candidate_id}/resume -- attach a resume file
POST   /jobs/{job_id}/resumes                         -- bulk resume intake
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ats.core.errors import ATSError
from ats.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from ats.models.enums import AttachmentCategory
from ats.models.responses import (
    CandidateResponse,
    IntakeReport,
    MoveRequest,
    NoticeResponse,
    TransitionResult,
)
from ats.routers.deps import get_session, http_error, read_upload
from ats.services.intake import bulk_intake
from ats.services.session import ATSSession
from ats.services.transitions import StageTransitionController

logger = logging.getLogger(__name__)

router = APIRouter()


def _candidate_or_superseded(candidate: Candidate | None) -> Candidate:
    if candidate is None:
        raise HTTPException(status_code=409, detail="Result discarded after backend switch")
    return candidate


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post("/{job_id}/candidates", response_model=CandidateResponse, status_code=201)
async def create_candidate(
    job_id: str,
    body: CandidateCreate,
    session: ATSSession = Depends(get_session),
) -> CandidateResponse:
    try:
        candidate = await session.create_candidate(job_id, body)
    except ATSError as exc:
        raise http_error(exc) from exc
    return CandidateResponse(candidate=candidate, notice=session.last_notice or "")


@router.patch("/{job_id}/candidates/{candidate_id}", response_model=CandidateResponse)
async def update_candidate(
    job_id: str,
    candidate_id: str,
    body: CandidateUpdate,
    session: ATSSession = Depends(get_session),
) -> CandidateResponse:
    try:
        candidate = await session.update_candidate(job_id, candidate_id, body)
    except ATSError as exc:
        raise http_error(exc) from exc
    return CandidateResponse(
        candidate=_candidate_or_superseded(candidate),
        notice=session.last_notice or "",
    )


@router.delete("/{job_id}/candidates/{candidate_id}", response_model=NoticeResponse)
async def delete_candidate(
    job_id: str,
    candidate_id: str,
    session: ATSSession = Depends(get_session),
) -> NoticeResponse:
    try:
        await session.delete_candidate(job_id, candidate_id)
    except ATSError as exc:
        raise http_error(exc) from exc
    return NoticeResponse(notice=session.last_notice or "")


# ---------------------------------------------------------------------------
# Stage transitions
# ---------------------------------------------------------------------------


@router.post("/{job_id}/candidates/{candidate_id}/move", response_model=TransitionResult)
async def move_candidate(
    job_id: str,
    candidate_id: str,
    body: MoveRequest,
    session: ATSSession = Depends(get_session),
) -> TransitionResult:
    """Apply a drop gesture.

    Unresolvable drops and same-stage drops answer 200 with ``moved`` false.
    """
    controller = StageTransitionController(session)
    try:
        return await controller.move(job_id, candidate_id, body.target)
    except ATSError as exc:
        raise http_error(exc) from exc


# ---------------------------------------------------------------------------
# Resumes
# ---------------------------------------------------------------------------


@router.post("/{job_id}/candidates/{candidate_id}/resume", response_model=CandidateResponse)
async def upload_candidate_resume(
    job_id: str,
    candidate_id: str,
    file: UploadFile = File(...),
    session: ATSSession = Depends(get_session),
) -> CandidateResponse:
    attachment = await read_upload(file)
    try:
        session.require_candidate(job_id, candidate_id)
        reference = await session.upload_attachment(AttachmentCategory.resume, attachment)
        candidate = await session.update_candidate(
            job_id,
            candidate_id,
            CandidateUpdate(resume=reference),
            notice="Resume attached",
        )
    except ATSError as exc:
        raise http_error(exc) from exc
    return CandidateResponse(
        candidate=_candidate_or_superseded(candidate),
        notice=session.last_notice or "",
    )


@router.post("/{job_id}/resumes", response_model=IntakeReport)
async def upload_resumes(
    job_id: str,
    files: list[UploadFile] = File(...),
    session: ATSSession = Depends(get_session),
) -> IntakeReport:
    """Create one Sourced candidate per uploaded resume."""
    attachments = [await read_upload(f) for f in files]
    try:
        return await bulk_intake(session, job_id, attachments)
    except ATSError as exc:
        raise http_error(exc) from exc
