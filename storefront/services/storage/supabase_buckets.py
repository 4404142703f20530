"""
Supabase Storage (buckets) Implementation

Receipts and avatars are uploaded to public buckets; the app stores the
public URL on the owning row.
"""

from typing import Optional

from storefront.services.storage.interface import (
    DuplicateError,
    ObjectStorageInterface,
    StorageError,
)
from storefront.services.supabase_client import SupabaseClient


class SupabaseObjectStorage(ObjectStorageInterface):
    """Object storage backed by Supabase Storage buckets."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        db = await self._client.connect()
        file_options = {
            "content-type": content_type,
            "upsert": "true" if upsert else "false",
        }
        try:
            await db.storage.from_(bucket).upload(path, data, file_options)
        except Exception as e:
            if "already exists" in str(e).lower() or "duplicate" in str(e).lower():
                raise DuplicateError(f"Object already exists: {bucket}/{path}") from e
            raise StorageError(f"Failed to upload {bucket}/{path}: {e}") from e
        return path

    async def get_public_url(self, bucket: str, path: str) -> str:
        db = await self._client.connect()
        try:
            return await db.storage.from_(bucket).get_public_url(path)
        except Exception as e:
            raise StorageError(f"Failed to get public URL for {bucket}/{path}: {e}") from e
