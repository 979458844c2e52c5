"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.

The remote backend is optional: leaving ``SUPABASE_URL`` / ``SUPABASE_KEY``
empty forces Local-only mode and disables the backend switch.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from ats.models.enums import PersistMode, Stage


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase (optional)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_BUCKET: str = "ats-public"
    REMOTE_TIMEOUT_SECONDS: float = 15.0

    # Persistence
    DEFAULT_BACKEND: PersistMode | None = None
    DATA_DIR: str = ".ats-data"

    # Soft WIP limits per stage (Hired / Rejected are uncapped)
    WIP_LIMIT_SOURCED: int = 20
    WIP_LIMIT_FIRST_ROUND: int = 15
    WIP_LIMIT_SECOND_ROUND: int = 12
    WIP_LIMIT_FINAL_ROUND: int = 10

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def remote_configured(self) -> bool:
        """True when both Supabase credentials are present."""
        return bool(self.SUPABASE_URL.strip() and self.SUPABASE_KEY.strip())

    @property
    def initial_backend(self) -> PersistMode:
        """Backend used at startup.

        Remote is only honoured when configured; otherwise Local wins.
        """
        if not self.remote_configured:
            return PersistMode.local
        return self.DEFAULT_BACKEND or PersistMode.remote

    @property
    def wip_limits(self) -> dict[Stage, int | None]:
        """WIP limit per stage; ``None`` means uncapped."""
        return {
            Stage.sourced: self.WIP_LIMIT_SOURCED,
            Stage.first_round: self.WIP_LIMIT_FIRST_ROUND,
            Stage.second_round: self.WIP_LIMIT_SECOND_ROUND,
            Stage.final_round: self.WIP_LIMIT_FINAL_ROUND,
            Stage.hired: None,
            Stage.rejected: None,
        }


settings = Settings()
