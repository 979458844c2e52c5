"""Shared test fixtures.

Provides an isolated snapshot directory, local adapter and session fixtures,
a chainable async mock Supabase client and a ``test_client`` for FastAPI.
"""

from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from ats.core.config import settings
from ats.services.session import ATSSession
from ats.storage.local import LocalAdapter
from ats.storage.snapshots import SnapshotFiles


def chainable_table_mock(rows: list[dict[str, Any]] | None = None) -> MagicMock:
    """Return a table mock that supports fluent chaining and an awaitable execute."""
    m = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "order", "limit"):
        getattr(m, method).return_value = m
    m.execute = AsyncMock(return_value=MagicMock(data=rows or []))
    return m


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point snapshots at a temp dir and force local-only mode."""
    data_dir = tmp_path / "ats-data"
    monkeypatch.setattr(settings, "DATA_DIR", str(data_dir))
    monkeypatch.setattr(settings, "SUPABASE_URL", "")
    monkeypatch.setattr(settings, "SUPABASE_KEY", "")
    monkeypatch.setattr(settings, "DEFAULT_BACKEND", None)
    return data_dir


@pytest.fixture()
def snapshots(isolated_settings: Path) -> SnapshotFiles:
    return SnapshotFiles(isolated_settings)


@pytest.fixture()
def local_adapter(snapshots: SnapshotFiles) -> LocalAdapter:
    """A local adapter on an empty directory, i.e. the seeded demo board."""
    return LocalAdapter(snapshots)


@pytest.fixture()
def session(local_adapter: LocalAdapter) -> ATSSession:
    return ATSSession(local_adapter, wip_limits=settings.wip_limits)


@pytest.fixture()
def mock_supabase() -> MagicMock:
    """A mock async Supabase client with one remote job and candidate."""
    client = MagicMock()
    tables = {
        "jobs": chainable_table_mock([
            {
                "id": "job-remote-1",
                "title": "Backend Engineer",
                "department": "Platform",
                "location": "Remote",
                "created_at": "2024-05-01T10:00:00Z",
            }
        ]),
        "candidates": chainable_table_mock([
            {
                "id": "cand-remote-1",
                "job_id": "job-remote-1",
                "name": "Maya Patel",
                "email": "maya@example.com",
                "tags": '["Python", "Postgres"]',
                "score": 88,
                "stage": "screening",
                "applied_at": "2024-05-02T09:30:00Z",
            }
        ]),
    }
    client.table.side_effect = lambda name: tables[name]
    client.tables = tables

    bucket = MagicMock()
    bucket.upload = AsyncMock(return_value=MagicMock())
    bucket.get_public_url = AsyncMock(
        return_value="https://example.supabase.co/storage/v1/object/public/ats-public/file"
    )
    client.storage.from_.return_value = bucket
    client.bucket = bucket
    return client


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient running the app lifespan."""
    from ats.main import app

    with TestClient(app) as client:
        yield client
