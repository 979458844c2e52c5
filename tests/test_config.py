"""Unit tests for configuration, Supabase client, logging and /health."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from ats.models.enums import PersistMode, Stage


class TestSettings:
    """Settings loading via pydantic-settings."""

    def test_settings_defaults(self) -> None:
        """Given no env vars, local-only defaults are applied."""
        with patch.dict("os.environ", {}, clear=True):
            from ats.core.config import Settings

            s = Settings(_env_file=None)  # type: ignore[call-arg]
            assert s.SUPABASE_URL == ""
            assert s.SUPABASE_BUCKET == "ats-public"
            assert s.DATA_DIR == ".ats-data"
            assert s.REMOTE_TIMEOUT_SECONDS == 15.0
            assert s.ALLOWED_ORIGINS == "*"
            assert s.LOG_LEVEL == "INFO"
            assert s.remote_configured is False
            assert s.initial_backend == PersistMode.local

    def test_settings_loads_supabase_credentials(self) -> None:
        """Given both credentials, remote becomes the default backend."""
        env_overrides = {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_KEY": "test-key-123",
        }
        with patch.dict("os.environ", env_overrides, clear=False):
            from ats.core.config import Settings

            s = Settings(_env_file=None)  # type: ignore[call-arg]
            assert s.remote_configured is True
            assert s.initial_backend == PersistMode.remote

    def test_default_backend_override(self) -> None:
        env_overrides = {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_KEY": "test-key-123",
            "DEFAULT_BACKEND": "local",
        }
        with patch.dict("os.environ", env_overrides, clear=False):
            from ats.core.config import Settings

            s = Settings(_env_file=None)  # type: ignore[call-arg]
            assert s.initial_backend == PersistMode.local

    def test_remote_default_ignored_without_credentials(self) -> None:
        with patch.dict("os.environ", {"DEFAULT_BACKEND": "remote"}, clear=True):
            from ats.core.config import Settings

            s = Settings(_env_file=None)  # type: ignore[call-arg]
            assert s.initial_backend == PersistMode.local

    def test_wip_limits(self) -> None:
        with patch.dict("os.environ", {"WIP_LIMIT_FINAL_ROUND": "3"}, clear=True):
            from ats.core.config import Settings

            limits = Settings(_env_file=None).wip_limits  # type: ignore[call-arg]
            assert limits[Stage.sourced] == 20
            assert limits[Stage.first_round] == 15
            assert limits[Stage.second_round] == 12
            assert limits[Stage.final_round] == 3
            assert limits[Stage.hired] is None
            assert limits[Stage.rejected] is None


class TestSupabaseClient:
    """Supabase singleton async client."""

    @pytest.mark.asyncio
    async def test_get_supabase_is_singleton(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Given multiple calls, get_supabase creates the client once."""
        import ats.db.supabase as supa_mod
        from ats.core.config import settings

        monkeypatch.setattr(settings, "SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setattr(settings, "SUPABASE_KEY", "test-key")
        mock_client = MagicMock()
        with patch(
            "ats.db.supabase.acreate_client", new=AsyncMock(return_value=mock_client)
        ) as mock_create:
            supa_mod.reset_supabase()
            first = await supa_mod.get_supabase()
            second = await supa_mod.get_supabase()
            assert first is mock_client
            assert first is second
            mock_create.assert_awaited_once_with("https://test.supabase.co", "test-key")
        supa_mod.reset_supabase()

    @pytest.mark.asyncio
    async def test_get_supabase_requires_configuration(self) -> None:
        import ats.db.supabase as supa_mod

        supa_mod.reset_supabase()
        with pytest.raises(RuntimeError):
            await supa_mod.get_supabase()


class TestHealthEndpoint:
    """GET /health reports backend and job count."""

    def test_health_local_only(self, test_client: TestClient) -> None:
        response = test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["backend"] == "local"
        assert body["remote_configured"] is False
        assert body["jobs"] == 1


class TestLogging:
    """Structured logging configuration."""

    def test_setup_logging_configures_root_logger(self) -> None:
        """Given setup_logging is called, root logger has one structured handler."""
        import logging

        from ats.core.logging import setup_logging

        setup_logging()
        setup_logging()
        root = logging.getLogger()
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert handler.formatter is not None
        fmt = handler.formatter._fmt
        assert "%(levelname)" in fmt
        assert "%(asctime)" in fmt
        assert "%(name)" in fmt
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_explicit_level_overrides_settings(self) -> None:
        import logging

        from ats.core.logging import setup_logging

        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        setup_logging()

    def test_extra_fields_are_rendered(self) -> None:
        """Given a record with extra context, the line ends with key=value pairs."""
        import logging

        from ats.core.logging import LOG_FORMAT, ContextFormatter

        record = logging.LogRecord(
            "ats.storage", logging.WARNING, __file__, 1, "snapshot_undecodable", None, None
        )
        record.path = "/data/ats.json"
        record.job_id = "j1"
        line = ContextFormatter(fmt=LOG_FORMAT).format(record)
        assert line.endswith("snapshot_undecodable | job_id=j1 path=/data/ats.json")

        plain = logging.LogRecord("ats", logging.INFO, __file__, 1, "ready", None, None)
        assert ContextFormatter(fmt=LOG_FORMAT).format(plain).endswith("| ats | ready")
