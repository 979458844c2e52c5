"""Board view and saved view endpoints.

GET    /board               -- the selected job grouped into stage columns
PUT    /board/query         -- set the fuzzy search query
PUT    /board/filters       -- set the structured filters
DELETE /board/filters       -- clear the structured filters
PUT    /board/blind         -- hide or show candidate names
GET    /views               -- saved view presets
POST   /views               -- save the given (or current) query and filters
DELETE /views/{view_id}     -- delete a preset
POST   /views/{view_id}/apply -- replace query and filters with a preset's
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ats.core.errors import ATSError
from ats.models.filters import BoardView, CandidateFilters, ViewPreset, ViewPresetCreate
from ats.models.responses import BlindRequest, NoticeResponse, QueryRequest
from ats.routers.deps import get_session, get_views, http_error
from ats.services.session import ATSSession
from ats.services.views import ViewPresetStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


@router.get("/board", response_model=BoardView)
async def get_board(session: ATSSession = Depends(get_session)) -> BoardView:
    """Return the filtered board; no selected job yields empty columns."""
    return session.board()


@router.put("/board/query", response_model=BoardView)
async def set_query(
    body: QueryRequest,
    session: ATSSession = Depends(get_session),
) -> BoardView:
    session.set_query(body.query)
    return session.board()


@router.put("/board/filters", response_model=BoardView)
async def set_filters(
    body: CandidateFilters,
    session: ATSSession = Depends(get_session),
) -> BoardView:
    session.set_filters(body)
    return session.board()


@router.delete("/board/filters", response_model=BoardView)
async def clear_filters(session: ATSSession = Depends(get_session)) -> BoardView:
    session.clear_filters()
    return session.board()


@router.put("/board/blind", response_model=BoardView)
async def set_blind(
    body: BlindRequest,
    session: ATSSession = Depends(get_session),
) -> BoardView:
    session.set_blind(body.blind)
    return session.board()


# ---------------------------------------------------------------------------
# Saved views
# ---------------------------------------------------------------------------


@router.get("/views", response_model=list[ViewPreset])
async def list_views(views: ViewPresetStore = Depends(get_views)) -> list[ViewPreset]:
    return views.list_presets()


@router.post("/views", response_model=ViewPreset, status_code=201)
async def save_view(
    body: ViewPresetCreate,
    views: ViewPresetStore = Depends(get_views),
) -> ViewPreset:
    try:
        return views.save_preset(body.name, body.filters, body.query)
    except ATSError as exc:
        raise http_error(exc) from exc


@router.delete("/views/{view_id}", response_model=NoticeResponse)
async def delete_view(
    view_id: str,
    views: ViewPresetStore = Depends(get_views),
) -> NoticeResponse:
    try:
        views.delete_preset(view_id)
    except ATSError as exc:
        raise http_error(exc) from exc
    return NoticeResponse(notice="View deleted")


@router.post("/views/{view_id}/apply", response_model=BoardView)
async def apply_view(
    view_id: str,
    session: ATSSession = Depends(get_session),
    views: ViewPresetStore = Depends(get_views),
) -> BoardView:
    try:
        preset = views.get_preset(view_id)
    except ATSError as exc:
        raise http_error(exc) from exc
    session.apply_preset(preset)
    session.notify(f"Applied view {preset.name}")
    return session.board()
