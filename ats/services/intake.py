"""Bulk resume intake.

Each uploaded file becomes one ``Sourced`` candidate whose name is guessed
from the filename and whose resume is the uploaded file.  A failing file is
reported and the rest of the batch carries on.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ats.core.constants import DEFAULT_CANDIDATE_NAME
from ats.core.errors import ATSError
from ats.models.attachment import Attachment
from ats.models.candidate import CandidateCreate
from ats.models.enums import AttachmentCategory, Stage
from ats.models.responses import IntakeFailure, IntakeReport
from ats.services.session import ATSSession

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.[^.]+$")
_SEPARATORS_RE = re.compile(r"[._-]+")
_WHITESPACE_RE = re.compile(r"\s+")
_DIGITS_RE = re.compile(r"\d+")


def guess_candidate_name(filename: str) -> str:
    """Guess a person's name from a resume filename.

    ``John_Doe_2.pdf`` -> ``John Doe``.  Falls back to the cleaned base name
    when stripping digits leaves nothing, then to ``DEFAULT_CANDIDATE_NAME``.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    base = _EXTENSION_RE.sub("", name)
    base = _SEPARATORS_RE.sub(" ", base)
    base = _WHITESPACE_RE.sub(" ", base).strip()
    guess = _DIGITS_RE.sub("", base).strip()
    return guess or base or DEFAULT_CANDIDATE_NAME


async def bulk_intake(
    session: ATSSession,
    job_id: str,
    attachments: Sequence[Attachment],
) -> IntakeReport:
    """Create one candidate per attachment in *job_id*.

    Raises ``NotFoundFailure`` up front when the job does not exist; any
    later failure is recorded per file.
    """
    session.require_job(job_id)
    report = IntakeReport(job_id=job_id)

    for attachment in attachments:
        name = guess_candidate_name(attachment.filename)
        try:
            resume = await session.upload_attachment(AttachmentCategory.resume, attachment)
            candidate = await session.create_candidate(
                job_id,
                CandidateCreate(name=name, stage=Stage.sourced, resume=resume),
                notice=None,
            )
        except ATSError as exc:
            logger.warning(
                "intake_file_failed",
                extra={"filename": attachment.filename, "error_message": exc.message},
            )
            report.failures.append(
                IntakeFailure(filename=attachment.filename, message=f"Upload failed: {exc.message}")
            )
            continue
        report.created.append(candidate)

    total = len(attachments)
    plural = "" if total == 1 else "s"
    if report.failures:
        report.notice = f"{len(report.created)} of {total} resume{plural} uploaded"
    else:
        report.notice = f"{total} resume{plural} uploaded"
    session.notify(report.notice)
    logger.info(
        "intake_completed",
        extra={
            "job_id": job_id,
            "created": len(report.created),
            "failed": len(report.failures),
        },
    )
    return report
