"""Shared router dependencies and helpers."""

from __future__ import annotations

from fastapi import HTTPException, Request, UploadFile

from ats.core.errors import ATSError
from ats.models.attachment import Attachment
from ats.services.session import ATSSession
from ats.services.views import ViewPresetStore


def get_session(request: Request) -> ATSSession:
    """Return the process-wide board session created at startup."""
    return request.app.state.session


def get_views(request: Request) -> ViewPresetStore:
    return request.app.state.views


def http_error(exc: ATSError) -> HTTPException:
    """Translate a board failure into the HTTP error the client sees."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)


async def read_upload(upload: UploadFile) -> Attachment:
    content = await upload.read()
    return Attachment(
        filename=upload.filename or "upload",
        content=content,
        content_type=upload.content_type,
    )
