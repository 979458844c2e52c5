"""Whole-state and backend endpoints.

GET  /state    -- the canonical ATSState snapshot
GET  /backend  -- active backend and whether switching is possible
POST /backend  -- switch backend (Remote reloads the board wholesale)
POST /reload   -- re-read the board from the active backend
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ats.core.config import settings
from ats.core.errors import ATSError
from ats.models.responses import BackendStatus, BackendSwitchRequest, NoticeResponse
from ats.models.state import ATSState
from ats.routers.deps import get_session, http_error
from ats.services.session import ATSSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _backend_status(session: ATSSession) -> BackendStatus:
    return BackendStatus(
        mode=session.mode,
        remote_configured=settings.remote_configured,
        can_switch=session.can_switch,
    )


@router.get("/state", response_model=ATSState)
async def get_state(session: ATSSession = Depends(get_session)) -> ATSState:
    return session.store.get_state()


@router.get("/backend", response_model=BackendStatus)
async def get_backend(session: ATSSession = Depends(get_session)) -> BackendStatus:
    return _backend_status(session)


@router.post("/backend", response_model=BackendStatus)
async def switch_backend(
    body: BackendSwitchRequest,
    session: ATSSession = Depends(get_session),
) -> BackendStatus:
    """Switch between local and remote persistence.

    A failed remote load keeps the current backend and returns 502.
    """
    try:
        await session.switch_backend(body.mode)
    except ATSError as exc:
        raise http_error(exc) from exc
    return _backend_status(session)


@router.post("/reload", response_model=NoticeResponse)
async def reload_board(session: ATSSession = Depends(get_session)) -> NoticeResponse:
    try:
        notice = await session.reload()
    except ATSError as exc:
        raise http_error(exc) from exc
    return NoticeResponse(notice=notice)
