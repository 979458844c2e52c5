"""Operation results and API response schemas.

These are service / API-layer shapes, not stored records.
"""

from typing import Literal

from pydantic import BaseModel, Field

from ats.models.base import CamelModel
from ats.models.candidate import Candidate
from ats.models.enums import PersistMode, Stage
from ats.models.job import Job

TransitionReason = Literal["moved", "same_stage", "unresolved", "superseded"]


class TransitionResult(CamelModel):
    """Outcome of a stage reassignment request."""
    moved: bool
    candidate_id: str
    reason: TransitionReason
    from_stage: Stage | None = None
    to_stage: Stage | None = None
    notice: str | None = None
    over_limit: list[Stage] = Field(default_factory=list)


class IntakeFailure(CamelModel):
    filename: str
    message: str


class IntakeReport(CamelModel):
    """Per-file outcome of a bulk resume upload."""
    job_id: str
    created: list[Candidate] = Field(default_factory=list)
    failures: list[IntakeFailure] = Field(default_factory=list)
    notice: str = ""


class JobResponse(CamelModel):
    job: Job
    notice: str


class CandidateResponse(CamelModel):
    candidate: Candidate
    notice: str


class NoticeResponse(CamelModel):
    notice: str
    applied: bool = True


class BackendStatus(CamelModel):
    mode: PersistMode
    remote_configured: bool
    can_switch: bool


class BackendSwitchRequest(BaseModel):
    mode: PersistMode


class MoveRequest(BaseModel):
    """Drop target: a stage name or the id of the card dropped onto."""
    target: str


class QueryRequest(BaseModel):
    query: str = ""


class BlindRequest(BaseModel):
    blind: bool
