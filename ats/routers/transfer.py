"""Backup, restore and export endpoints.

GET  /export/json          -- whole board as a downloadable JSON document
POST /import/json          -- replace the board with an uploaded document
GET  /export/csv           -- the filtered candidates of the selected job
GET  /attachments/{token}  -- a file stored by the local backend
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from ats.core.errors import ATSError
from ats.models.responses import NoticeResponse
from ats.routers.deps import get_session, http_error
from ats.services.session import ATSSession
from ats.services.transfer import (
    csv_filename,
    export_candidates_csv,
    export_state_json,
    import_state_json,
    json_filename,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _download(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/json")
async def export_json(session: ATSSession = Depends(get_session)) -> Response:
    document = export_state_json(session.store.get_state())
    return _download(document, "application/json", json_filename())


@router.post("/import/json", response_model=NoticeResponse)
async def import_json(
    file: UploadFile = File(...),
    session: ATSSession = Depends(get_session),
) -> NoticeResponse:
    """Replace the whole board; the current board is kept on any failure."""
    raw = await file.read()
    try:
        notice = import_state_json(session, raw)
    except ATSError as exc:
        raise http_error(exc) from exc
    return NoticeResponse(notice=notice)


@router.get("/export/csv")
async def export_csv(session: ATSSession = Depends(get_session)) -> Response:
    job = session.selected_job()
    if job is None:
        raise HTTPException(status_code=404, detail="No job selected")
    content = export_candidates_csv(session.filtered_candidates())
    return _download(content, "text/csv; charset=utf-8", csv_filename(job.title))


@router.get("/attachments/{token}")
async def download_attachment(
    token: str,
    session: ATSSession = Depends(get_session),
) -> Response:
    attachment = session.local.read_attachment(token)
    if attachment is None:
        raise HTTPException(status_code=404, detail="Attachment not found")
    return Response(
        content=attachment.content,
        media_type=attachment.content_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{attachment.filename}"'},
    )
