"""Unit tests for bulk resume intake."""

from unittest.mock import AsyncMock

import pytest

from ats.core.errors import AttachmentFailure, NotFoundFailure
from ats.models.attachment import Attachment
from ats.models.enums import Stage
from ats.services.intake import bulk_intake, guess_candidate_name
from ats.services.session import ATSSession


def _pdf(name: str) -> Attachment:
    return Attachment(filename=name, content=b"%PDF-1.4", content_type="application/pdf")


class TestGuessCandidateName:

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("John_Doe_2.pdf", "John Doe"),
            ("jane-smith.resume.docx", "jane smith resume"),
            ("C:\\Users\\me\\Priya  Nair.pdf", "Priya Nair"),
            ("2024.pdf", "2024"),
            ("...", "New Candidate"),
            ("", "New Candidate"),
        ],
    )
    def test_guess(self, filename: str, expected: str) -> None:
        assert guess_candidate_name(filename) == expected


class TestBulkIntake:

    @pytest.mark.asyncio
    async def test_creates_one_sourced_candidate_per_file(self, session: ATSSession) -> None:
        job = session.selected_job()

        report = await bulk_intake(session, job.id, [_pdf("John_Doe_2.pdf"), _pdf("ana-lima.pdf")])

        assert [c.name for c in report.created] == ["John Doe", "ana lima"]
        assert all(c.stage == Stage.sourced.value for c in report.created)
        assert all(c.resume is not None for c in report.created)
        assert report.created[0].resume.name == "John_Doe_2.pdf"
        assert report.created[0].resume.url.startswith("blob:ats/")
        assert report.failures == []
        assert report.notice == "2 resumes uploaded"
        assert len(session.selected_job().candidates) == 5

    @pytest.mark.asyncio
    async def test_failed_file_does_not_stop_batch(self, session: ATSSession) -> None:
        job = session.selected_job()
        real_upload = session.adapter.upload_attachment

        async def _flaky(category, attachment):  # type: ignore[no-untyped-def]
            if attachment.filename == "broken.pdf":
                raise AttachmentFailure("Upload broken.pdf failed: too large")
            return await real_upload(category, attachment)

        session.adapter.upload_attachment = AsyncMock(side_effect=_flaky)  # type: ignore[method-assign]

        report = await bulk_intake(session, job.id, [_pdf("broken.pdf"), _pdf("Ok_Person.pdf")])

        assert [c.name for c in report.created] == ["Ok Person"]
        assert report.failures[0].filename == "broken.pdf"
        assert report.failures[0].message.startswith("Upload failed: ")
        assert report.notice == "1 of 2 resumes uploaded"

    @pytest.mark.asyncio
    async def test_unknown_job(self, session: ATSSession) -> None:
        with pytest.raises(NotFoundFailure):
            await bulk_intake(session, "missing", [_pdf("a.pdf")])
