"""Enum types for pipeline stages, backends and attachment categories."""

from enum import Enum


class Stage(str, Enum):
    """Pipeline stage a candidate occupies.

    Declaration order is the column order on the board.
    """
    sourced = "Sourced"
    first_round = "Interview: First Round"
    second_round = "Interview: Second Round"
    final_round = "Interview: Final round"
    hired = "Hired"
    rejected = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.hired, Stage.rejected)


class PersistMode(str, Enum):
    """Which persistence backend is active."""
    local = "local"
    remote = "remote"


class AttachmentCategory(str, Enum):
    """Attachment kind; the value is the storage folder."""
    job_description = "jd"
    resume = "resumes"


class ErrorKind(str, Enum):
    """Failure taxonomy surfaced to callers."""
    transport = "transport"
    validation = "validation"
    parse = "parse"
    attachment = "attachment"
