"""FastAPI application entry point.

Configures CORS, structured logging, lifespan events (board session and
saved views) and router registration.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ats.core.config import settings
from ats.core.errors import ATSError
from ats.core.logging import setup_logging
from ats.models.enums import PersistMode
from ats.routers import board, candidates, health, jobs, state, transfer
from ats.services.session import build_session
from ats.services.views import ViewPresetStore
from ats.storage.snapshots import SnapshotFiles

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks.

    Builds the board session on the local snapshot and, when the remote
    backend is configured as the default, loads it.  A failed remote load
    leaves the board on local storage.
    """
    setup_logging()
    logger.info("Application starting up")
    session = build_session(settings)
    if settings.initial_backend == PersistMode.remote:
        try:
            await session.switch_backend(PersistMode.remote)
        except ATSError as exc:
            logger.warning(
                "remote_backend_unavailable_using_local",
                extra={"error_message": exc.message},
            )
    application.state.session = session
    application.state.views = ViewPresetStore(SnapshotFiles(settings.DATA_DIR))
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Internal ATS API",
    description="Kanban applicant tracking board with local and Supabase persistence",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(state.router, prefix="/api/v1", tags=["State"])
app.include_router(jobs.router, prefix="/api/v1/jobs", tags=["Jobs"])
app.include_router(candidates.router, prefix="/api/v1/jobs", tags=["Candidates"])
app.include_router(board.router, prefix="/api/v1", tags=["Board"])
app.include_router(transfer.router, prefix="/api/v1", tags=["Transfer"])
