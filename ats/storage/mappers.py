"""Row / document mappers shared by both backends.

``jobs`` and ``candidates`` rows use the snake_case column names of the
relational schema (see ``schema.sql``); records use the pydantic models.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from ats.core.constants import (
    DEFAULT_CANDIDATE_NAME,
    DEFAULT_JD_NAME,
    DEFAULT_RESUME_NAME,
)
from ats.core.errors import ParseFailure
from ats.models.attachment import FileReference
from ats.models.base import utcnow
from ats.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from ats.models.enums import Stage
from ats.models.job import Job, JobCreate, JobUpdate
from ats.models.state import ATSState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Whole-state documents
# ---------------------------------------------------------------------------

def parse_state_document(raw: str | bytes) -> ATSState:
    """Parse a snapshot / export document.

    Raises ``ParseFailure`` for invalid JSON or a wrong shape.  The returned
    state already satisfies the selection invariant.
    """
    try:
        state = ATSState.model_validate_json(raw)
    except ValidationError as exc:
        raise ParseFailure(
            f"Invalid state document: {exc.error_count()} problem(s)", exc
        ) from exc
    return state.with_valid_selection()


def dump_state_document(state: ATSState) -> str:
    return state.model_dump_json(by_alias=True, indent=2)


# ---------------------------------------------------------------------------
# Create payload -> record
# ---------------------------------------------------------------------------

def new_job(job_id: str, fields: JobCreate, jd: FileReference | None = None) -> Job:
    return Job(
        id=job_id,
        title=fields.title,
        department=fields.department,
        location=fields.location,
        created_at=utcnow(),
        jd=jd,
        candidates=[],
    )


def new_candidate(
    candidate_id: str,
    fields: CandidateCreate,
    resume: FileReference | None = None,
) -> Candidate:
    return Candidate(
        id=candidate_id,
        name=(fields.name or "").strip() or DEFAULT_CANDIDATE_NAME,
        email=fields.email,
        phone=fields.phone,
        tags=fields.tags,
        score=fields.score,
        resume=resume or fields.resume,
        notes=fields.notes,
        stage=fields.stage.value,
        applied_at=fields.applied_at or utcnow(),
    )


# ---------------------------------------------------------------------------
# Rows -> records
# ---------------------------------------------------------------------------

def _parse_tags(raw: Any) -> list[str]:
    """``text[]`` columns arrive as lists; older rows stored a JSON string."""
    if isinstance(raw, list):
        return [str(t) for t in raw]
    if isinstance(raw, str) and raw:
        try:
            parsed = json.loads(raw)
        except ValueError:
            return []
        if isinstance(parsed, list):
            return [str(t) for t in parsed]
    return []


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("unparseable_timestamp", extra={"value": raw})
    return utcnow()


def _file_ref(url: Any, name: Any, default_name: str) -> FileReference | None:
    if not url:
        return None
    return FileReference(name=name or default_name, url=str(url))


def candidate_from_row(row: dict[str, Any]) -> Candidate:
    score = row.get("score")
    return Candidate(
        id=str(row["id"]),
        name=row.get("name") or "",
        email=row.get("email") or None,
        phone=row.get("phone") or None,
        tags=_parse_tags(row.get("tags")),
        score=score if isinstance(score, int) and not isinstance(score, bool) else None,
        resume=_file_ref(row.get("resume_url"), row.get("resume_name"), DEFAULT_RESUME_NAME),
        notes=row.get("notes") or None,
        stage=row.get("stage") or Stage.sourced.value,
        applied_at=_parse_timestamp(row.get("applied_at")),
    )


def job_from_row(row: dict[str, Any], candidates: list[Candidate] | None = None) -> Job:
    return Job(
        id=str(row["id"]),
        title=row.get("title") or "",
        department=row.get("department") or None,
        location=row.get("location") or None,
        created_at=_parse_timestamp(row.get("created_at")),
        jd=_file_ref(row.get("jd_url"), row.get("jd_name"), DEFAULT_JD_NAME),
        candidates=candidates or [],
    )


def rows_to_state(
    job_rows: list[dict[str, Any]],
    candidate_rows: list[dict[str, Any]],
) -> ATSState:
    """Group candidate rows under their job, keeping row order.

    Candidates whose job is not in *job_rows* are dropped.
    """
    by_job: dict[str, list[Candidate]] = {}
    for row in candidate_rows:
        by_job.setdefault(str(row.get("job_id")), []).append(candidate_from_row(row))
    jobs = [job_from_row(row, by_job.get(str(row["id"]), [])) for row in job_rows]
    return ATSState(jobs=jobs, selected_job_id=None).with_valid_selection()


# ---------------------------------------------------------------------------
# Records / payloads -> rows
# ---------------------------------------------------------------------------

def job_insert_payload(fields: JobCreate, jd: FileReference | None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": fields.title,
        "department": fields.department or "",
        "location": fields.location or "",
    }
    if jd is not None:
        payload["jd_name"] = jd.name
        payload["jd_url"] = jd.url
    return payload


def job_update_payload(patch: JobUpdate) -> dict[str, Any]:
    changes = patch.changes()
    payload: dict[str, Any] = {
        key: changes[key] for key in ("title", "department", "location") if key in changes
    }
    if "jd" in changes:
        jd = changes["jd"] or {}
        payload["jd_name"] = jd.get("name")
        payload["jd_url"] = jd.get("url")
    return payload


def candidate_insert_payload(
    job_id: str,
    fields: CandidateCreate,
    resume: FileReference | None,
) -> dict[str, Any]:
    resume = resume or fields.resume
    payload: dict[str, Any] = {
        "job_id": job_id,
        "name": (fields.name or "").strip() or DEFAULT_CANDIDATE_NAME,
        "email": fields.email or "",
        "phone": fields.phone or "",
        "tags": fields.tags,
        "score": fields.score,
        "notes": fields.notes or "",
        "stage": fields.stage.value,
        "applied_at": (fields.applied_at or utcnow()).isoformat(),
    }
    if resume is not None:
        payload["resume_name"] = resume.name
        payload["resume_url"] = resume.url
    return payload


def candidate_update_payload(patch: CandidateUpdate) -> dict[str, Any]:
    changes = patch.changes()
    payload: dict[str, Any] = {
        key: changes[key]
        for key in ("name", "email", "phone", "tags", "score", "notes", "stage")
        if key in changes
    }
    if "applied_at" in changes and changes["applied_at"] is not None:
        payload["applied_at"] = changes["applied_at"].isoformat()
    if "resume" in changes:
        resume = changes["resume"] or {}
        payload["resume_name"] = resume.get("name")
        payload["resume_url"] = resume.get("url")
    return payload
