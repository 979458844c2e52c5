"""Pydantic models for jobs.

A job exclusively owns its ordered candidate list.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from ats.models.attachment import FileReference
from ats.models.base import CamelModel, as_aware, utcnow
from ats.models.candidate import Candidate


class JobCreate(CamelModel):
    """Payload for creating a job.  A blank title is rejected by the session."""
    title: str = ""
    department: str | None = None
    location: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> str:
        return str(value or "").strip()


class JobUpdate(CamelModel):
    """Partial update; only explicitly set fields are applied."""
    title: str | None = None
    department: str | None = None
    location: str | None = None
    jd: FileReference | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> str | None:
        return None if value is None else str(value).strip()

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class Job(CamelModel):
    """Full job record as held by the canonical store."""

    id: str
    title: str
    department: str | None = None
    location: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    jd: FileReference | None = None
    candidates: list[Candidate] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, value: datetime) -> datetime:
        return as_aware(value)

    def find_candidate(self, candidate_id: str) -> Candidate | None:
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate
        return None
