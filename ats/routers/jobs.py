"""Job endpoints.

GET    /jobs                 -- every job with its candidates
POST   /jobs                 -- create a job (becomes the selected job)
PATCH  /jobs/{job_id}        -- edit title / department / location
DELETE /jobs/{job_id}        -- delete a job and all its candidates
POST   /jobs/{job_id}/select -- make a job the selected one
POST   /jobs/{job_id}/jd     -- upload and attach a job description file
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ats.core.errors import ATSError
from ats.models.job import Job, JobCreate, JobUpdate
from ats.models.responses import JobResponse, NoticeResponse
from ats.routers.deps import get_session, http_error, read_upload
from ats.services.session import ATSSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _job_or_superseded(job: Job | None) -> Job:
    # A backend switch while the call was in flight drops the result
    if job is None:
        raise HTTPException(status_code=409, detail="Result discarded after backend switch")
    return job


@router.get("", response_model=list[Job])
async def list_jobs(session: ATSSession = Depends(get_session)) -> list[Job]:
    return session.store.get_state().jobs


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    body: JobCreate,
    session: ATSSession = Depends(get_session),
) -> JobResponse:
    try:
        job = await session.create_job(body)
    except ATSError as exc:
        raise http_error(exc) from exc
    return JobResponse(job=job, notice=session.last_notice or "")


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    body: JobUpdate,
    session: ATSSession = Depends(get_session),
) -> JobResponse:
    try:
        job = await session.update_job(job_id, body)
    except ATSError as exc:
        raise http_error(exc) from exc
    return JobResponse(job=_job_or_superseded(job), notice=session.last_notice or "")


@router.delete("/{job_id}", response_model=NoticeResponse)
async def delete_job(job_id: str, session: ATSSession = Depends(get_session)) -> NoticeResponse:
    try:
        await session.delete_job(job_id)
    except ATSError as exc:
        raise http_error(exc) from exc
    return NoticeResponse(notice=session.last_notice or "")


@router.post("/{job_id}/select", response_model=NoticeResponse)
async def select_job(job_id: str, session: ATSSession = Depends(get_session)) -> NoticeResponse:
    try:
        session.select_job(job_id)
    except ATSError as exc:
        raise http_error(exc) from exc
    return NoticeResponse(notice=f"Selected {job_id}")


@router.post("/{job_id}/jd", response_model=JobResponse)
async def upload_job_description(
    job_id: str,
    file: UploadFile = File(...),
    session: ATSSession = Depends(get_session),
) -> JobResponse:
    """Store the uploaded file and set it as the job's description."""
    attachment = await read_upload(file)
    try:
        job = await session.attach_job_description(job_id, attachment)
    except ATSError as exc:
        raise http_error(exc) from exc
    return JobResponse(job=_job_or_superseded(job), notice=session.last_notice or "")
