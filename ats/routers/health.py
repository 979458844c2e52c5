"""Health check endpoint.

Reports the active backend, whether the remote backend is configured and
how many jobs the canonical store currently holds.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from ats.core.config import settings
from ats.routers.deps import get_session
from ats.services.session import ATSSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(session: ATSSession = Depends(get_session)) -> dict[str, Any]:
    """Return service status; never touches the remote backend."""
    state = session.store.get_state()
    return {
        "status": "ok",
        "backend": session.mode.value,
        "remote_configured": settings.remote_configured,
        "jobs": len(state.jobs),
    }
