"""Models for structured filters, saved views and the derived board."""

from datetime import date
from typing import Any

from pydantic import Field, field_validator, model_validator

from ats.models.base import CamelModel
from ats.models.candidate import Candidate, clean_tags
from ats.models.enums import Stage


class CandidateFilters(CamelModel):
    """Structured filters applied after text search."""
    tags: list[str] = Field(default_factory=list)
    score_min: int | None = None
    score_max: int | None = None
    applied_from: date | None = None
    applied_to: date | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        # The filter panel sends a comma separated string
        if value is None:
            return []
        if isinstance(value, str):
            return value.split(",")
        return value

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return clean_tags(value)

    @model_validator(mode="after")
    def _check_score_range(self) -> "CandidateFilters":
        if (
            self.score_min is not None
            and self.score_max is not None
            and self.score_min > self.score_max
        ):
            raise ValueError("score_min must not exceed score_max")
        return self

    @property
    def is_empty(self) -> bool:
        return not (
            self.tags
            or self.score_min is not None
            or self.score_max is not None
            or self.applied_from
            or self.applied_to
        )


class ViewPreset(CamelModel):
    """A named, saved combination of search query and filters."""
    id: str
    name: str
    filters: CandidateFilters = Field(default_factory=CandidateFilters)
    query: str = ""


class ViewPresetCreate(CamelModel):
    name: str
    filters: CandidateFilters = Field(default_factory=CandidateFilters)
    query: str = ""


class StageColumn(CamelModel):
    """One board column."""
    stage: Stage
    count: int = 0
    wip_limit: int | None = None
    over_limit: bool = False
    candidates: list[Candidate] = Field(default_factory=list)


class BoardView(CamelModel):
    """The filtered, grouped view of the selected job."""
    job_id: str | None = None
    job_title: str | None = None
    query: str = ""
    filters: CandidateFilters = Field(default_factory=CandidateFilters)
    columns: list[StageColumn] = Field(default_factory=list)
    total: int = 0
    filtered: int = 0
    blind: bool = False

    @property
    def has_job(self) -> bool:
        return self.job_id is not None

    def column(self, stage: Stage) -> StageColumn:
        for col in self.columns:
            if col.stage == stage:
                return col
        raise KeyError(stage)

    @property
    def counts(self) -> dict[Stage, int]:
        return {col.stage: col.count for col in self.columns}

    @property
    def over_limit_stages(self) -> list[Stage]:
        return [col.stage for col in self.columns if col.over_limit]

