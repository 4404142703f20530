"""
Shared Supabase client.

Auth, tables and buckets all go through one AsyncClient so that the
session obtained by signing in is the one used for row-level access.
"""

from typing import Optional

from pydantic import ValidationError
from supabase import AsyncClient, acreate_client

from storefront.config import SupabaseSettings, get_settings


class ConfigurationError(Exception):
    """The provider URL or key is missing or unusable."""
    pass


class SupabaseClient:
    """
    Low-level client wrapper.

    Creates the SDK client lazily on first use; construction never
    touches the network or the environment.
    """

    def __init__(self, settings: Optional[SupabaseSettings] = None):
        self._settings = settings
        self._client: Optional[AsyncClient] = None

    async def connect(self) -> AsyncClient:
        if self._client is None:
            try:
                settings = self._settings or get_settings().supabase
            except ValidationError as e:
                raise ConfigurationError(
                    f"Supabase is not configured (set SUPABASE_URL and SUPABASE_ANON_KEY): {e}"
                ) from e

            try:
                self._client = await acreate_client(settings.url, settings.anon_key)
            except Exception as e:
                raise ConfigurationError(f"Failed to create Supabase client: {e}") from e

        return self._client
