"""Remote persistence backend on Supabase (Postgres + Storage).

Every call is bounded by ``settings.REMOTE_TIMEOUT_SECONDS``.  Any error
raised by the client (network, PostgREST / constraint error, timeout) is
re-raised as ``TransportFailure``; storage errors during an attachment
upload become ``AttachmentFailure``.  Nothing here touches the canonical
store: callers apply results only after a call returns.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from supabase import AsyncClient

from ats.core.config import settings
from ats.core.errors import (
    ATSError,
    AttachmentFailure,
    TransportFailure,
    describe_exception,
)
from ats.db.supabase import get_supabase
from ats.models.attachment import Attachment, FileReference
from ats.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from ats.models.enums import AttachmentCategory, PersistMode
from ats.models.job import Job, JobCreate, JobUpdate
from ats.models.state import ATSState
from ats.storage.base import PersistenceAdapter
from ats.storage.mappers import (
    candidate_from_row,
    candidate_insert_payload,
    candidate_update_payload,
    job_from_row,
    job_insert_payload,
    job_update_payload,
    rows_to_state,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def attachment_path(category: AttachmentCategory, filename: str) -> str:
    """Storage key: ``{folder}/{epoch millis}-{original filename}``."""
    return f"{category.value}/{int(time.time() * 1000)}-{filename}"


class RemoteAdapter(PersistenceAdapter):
    """Backend talking to the ``jobs`` / ``candidates`` tables."""

    mode = PersistMode.remote

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[AsyncClient]] = get_supabase,
        bucket: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client_factory = client_factory
        self._bucket = bucket or settings.SUPABASE_BUCKET
        self._timeout = timeout if timeout is not None else settings.REMOTE_TIMEOUT_SECONDS

    async def _call(
        self,
        action: str,
        operation: Callable[[AsyncClient], Awaitable[T]],
        failure: type[ATSError] = TransportFailure,
    ) -> T:
        """Run *operation* with the client under the timeout, mapping errors."""
        try:
            client = await self._client_factory()
            return await asyncio.wait_for(operation(client), timeout=self._timeout)
        except ATSError:
            raise
        except Exception as exc:
            message = f"{action} failed: {describe_exception(exc)}"
            logger.warning(
                "remote_call_failed",
                extra={"action": action, "error_message": describe_exception(exc)},
            )
            raise failure(message, exc) from exc

    @staticmethod
    def _first_row(result: Any, action: str) -> dict[str, Any]:
        rows = getattr(result, "data", None) or []
        if not rows:
            raise TransportFailure(f"{action} failed: no row returned")
        return rows[0]

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load_all(self) -> ATSState:
        async def _load(client: AsyncClient) -> ATSState:
            jobs_result = await (
                client.table("jobs")
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            candidates_result = await client.table("candidates").select("*").execute()
            return rows_to_state(jobs_result.data or [], candidates_result.data or [])

        state = await self._call("Load board", _load)
        logger.info(
            "remote_board_loaded",
            extra={
                "jobs": len(state.jobs),
                "candidates": sum(len(j.candidates) for j in state.jobs),
            },
        )
        return state

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def create_job(self, fields: JobCreate, attachment: Attachment | None = None) -> Job:
        jd = None
        if attachment is not None:
            jd = await self.upload_attachment(AttachmentCategory.job_description, attachment)
        payload = job_insert_payload(fields, jd)

        async def _insert(client: AsyncClient) -> Any:
            return await client.table("jobs").insert(payload).execute()

        result = await self._call("Create job", _insert)
        return job_from_row(self._first_row(result, "Create job"))

    async def update_job(self, job_id: str, patch: JobUpdate) -> None:
        payload = job_update_payload(patch)
        if not payload:
            return

        async def _update(client: AsyncClient) -> Any:
            return await client.table("jobs").update(payload).eq("id", job_id).execute()

        await self._call("Update job", _update)

    async def delete_job(self, job_id: str) -> None:
        # candidates.job_id is ON DELETE CASCADE
        async def _delete(client: AsyncClient) -> Any:
            return await client.table("jobs").delete().eq("id", job_id).execute()

        await self._call("Delete job", _delete)

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    async def create_candidate(
        self,
        job_id: str,
        fields: CandidateCreate,
        attachment: Attachment | None = None,
    ) -> Candidate:
        resume = None
        if attachment is not None:
            resume = await self.upload_attachment(AttachmentCategory.resume, attachment)
        payload = candidate_insert_payload(job_id, fields, resume)

        async def _insert(client: AsyncClient) -> Any:
            return await client.table("candidates").insert(payload).execute()

        result = await self._call("Add candidate", _insert)
        return candidate_from_row(self._first_row(result, "Add candidate"))

    async def update_candidate(
        self, job_id: str, candidate_id: str, patch: CandidateUpdate
    ) -> None:
        payload = candidate_update_payload(patch)
        if not payload:
            return

        async def _update(client: AsyncClient) -> Any:
            return await (
                client.table("candidates")
                .update(payload)
                .eq("id", candidate_id)
                .eq("job_id", job_id)
                .execute()
            )

        await self._call("Update candidate", _update)

    async def delete_candidate(self, job_id: str, candidate_id: str) -> None:
        async def _delete(client: AsyncClient) -> Any:
            return await (
                client.table("candidates")
                .delete()
                .eq("id", candidate_id)
                .eq("job_id", job_id)
                .execute()
            )

        await self._call("Delete candidate", _delete)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    async def upload_attachment(
        self, category: AttachmentCategory, attachment: Attachment
    ) -> FileReference:
        path = attachment_path(category, attachment.filename)
        file_options = {
            "content-type": attachment.content_type or "application/octet-stream",
            "upsert": "false",
        }

        async def _upload(client: AsyncClient) -> str:
            bucket = client.storage.from_(self._bucket)
            await bucket.upload(path, attachment.content, file_options)
            return await bucket.get_public_url(path)

        url = await self._call(
            f"Upload {attachment.filename}", _upload, failure=AttachmentFailure
        )
        logger.info(
            "remote_attachment_uploaded",
            extra={"category": category.value, "path": path},
        )
        return FileReference(name=attachment.filename, url=url)
