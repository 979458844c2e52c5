"""Supabase client singleton.

Provides ``get_supabase()`` which returns a lazily-initialized, process-wide
async Supabase client using credentials from ``settings``.
"""

from supabase import AsyncClient, acreate_client

from ats.core.config import settings

_client: AsyncClient | None = None


async def get_supabase() -> AsyncClient:
    """Return the singleton Supabase client, creating it on first call.

    Raises ``RuntimeError`` when the remote backend is not configured.
    """
    global _client
    if _client is None:
        if not settings.remote_configured:
            raise RuntimeError("Supabase URL / key are not configured")
        _client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _client


def reset_supabase() -> None:
    """Drop the cached client (used after credentials change and in tests)."""
    global _client
    _client = None
