"""Pydantic models for attachments (resumes and job descriptions)."""

from pydantic import BaseModel


class FileReference(BaseModel):
    """Opaque pointer to an externally stored file."""
    name: str
    url: str


class Attachment(BaseModel):
    """An uploaded file waiting to be stored by the active backend."""
    filename: str
    content: bytes
    content_type: str | None = None
