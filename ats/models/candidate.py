"""Pydantic models for candidates.

``Candidate.stage`` keeps whatever string was stored so that unknown or legacy
values survive a round trip; readers go through ``normalize_stage`` (or
``Candidate.normalized_stage``) to place the record in a board column.
Create / update payloads normalize the stage at the boundary.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field, field_validator, model_validator

from ats.core.constants import LEGACY_STAGE_ALIASES
from ats.models.attachment import FileReference
from ats.models.base import CamelModel, as_aware, utcnow
from ats.models.enums import Stage

_STAGE_BY_VALUE: dict[str, Stage] = {s.value: s for s in Stage}


def normalize_stage(value: Any) -> Stage:
    """Map any stored stage value onto one of the board columns.

    Exact stage names win, then legacy aliases (case-insensitive); anything
    else lands in ``Sourced``.
    """
    if isinstance(value, Stage):
        return value
    raw = str(value or "")
    if raw in _STAGE_BY_VALUE:
        return _STAGE_BY_VALUE[raw]
    return LEGACY_STAGE_ALIASES.get(raw.lower(), Stage.sourced)


def is_stage(value: Any) -> bool:
    """True when *value* is exactly one of the stage names."""
    return isinstance(value, Stage) or (isinstance(value, str) and value in _STAGE_BY_VALUE)


def clean_tags(tags: list[str]) -> list[str]:
    """Drop blank tags and exact duplicates, keeping first-seen order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for tag in tags:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.add(tag)
            cleaned.append(tag)
    return cleaned


class CandidateCreate(CamelModel):
    """Payload for adding a candidate to a job."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    tags: list[str] = Field(default_factory=list)
    score: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None
    stage: Stage = Stage.sourced
    applied_at: datetime | None = None
    resume: FileReference | None = None

    @field_validator("stage", mode="before")
    @classmethod
    def _normalize_stage(cls, value: Any) -> Stage:
        return normalize_stage(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_or_empty(cls, value: Any) -> Any:
        return value if value is not None else []

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return clean_tags(value)


class CandidateUpdate(CamelModel):
    """Partial update; only explicitly set fields are applied."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    tags: list[str] | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None
    stage: Stage | None = None
    applied_at: datetime | None = None
    resume: FileReference | None = None

    @field_validator("stage", mode="before")
    @classmethod
    def _normalize_stage(cls, value: Any) -> Stage | None:
        return None if value is None else normalize_stage(value)

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else clean_tags(value)

    @model_validator(mode="after")
    def _reject_null_required(self) -> "CandidateUpdate":
        # Patched onto a Candidate, these cannot hold null
        for field in ("name", "stage", "applied_at"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Explicitly set fields as a python-mode dict keyed by attribute name."""
        data = self.model_dump(exclude_unset=True)
        if isinstance(data.get("stage"), Stage):
            data["stage"] = data["stage"].value
        return data


class Candidate(CamelModel):
    """Full candidate record as held by the canonical store."""

    id: str
    name: str = ""
    email: str | None = None
    phone: str | None = None
    tags: list[str] = Field(default_factory=list)
    score: int | None = Field(default=None, ge=0, le=100)
    resume: FileReference | None = None
    notes: str | None = None
    stage: str = Stage.sourced.value
    applied_at: datetime = Field(default_factory=utcnow)

    @field_validator("stage", mode="before")
    @classmethod
    def _stage_as_text(cls, value: Any) -> str:
        if isinstance(value, Enum):
            return str(value.value)
        return "" if value is None else str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_or_empty(cls, value: Any) -> Any:
        return value if value is not None else []

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return clean_tags(value)

    @field_validator("applied_at")
    @classmethod
    def _aware_applied_at(cls, value: datetime) -> datetime:
        return as_aware(value)

    @property
    def normalized_stage(self) -> Stage:
        return normalize_stage(self.stage)
