"""Async Supabase client wrapper."""

from typing import Optional
from supabase import acreate_client, AsyncClient
from supabase.lib.client_options import AsyncClientOptions
from src.utils.config import get_supabase_credentials
from src.utils.errors import StorageError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Global client instance (singleton pattern)
_client: Optional[AsyncClient] = None


async def get_supabase_client() -> AsyncClient:
    """Get or create the async Supabase client singleton."""
    global _client

    if _client is None:
        url, key = get_supabase_credentials()
        if not url or not key:
            raise StorageError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        # Service-role access, no user session to persist or refresh
        options = AsyncClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        try:
            _client = await acreate_client(url, key, options)
        except Exception as e:
            raise StorageError(f"Failed to create Supabase client: {e}") from e
        logger.info("Supabase client initialized", url=url)

    return _client
