"""
Object Storage using Cloudinary

Alternative home for receipt photos and avatars, selected with
OBJECT_STORAGE_BACKEND=cloudinary.

Buckets map to folders: "{root_folder}/{bucket}/{path}". The file
extension is dropped from the public id; Cloudinary tracks the format.
"""

from typing import Optional

import cloudinary
import cloudinary.uploader
from cloudinary import CloudinaryImage
from cloudinary.exceptions import Error as CloudinaryError

from storefront.config import CloudinarySettings, get_settings
from storefront.services.storage.interface import (
    DuplicateError,
    ObjectStorageInterface,
    StorageError,
)


class CloudinaryObjectStorage(ObjectStorageInterface):
    """Object storage backed by Cloudinary image uploads."""

    def __init__(self, settings: Optional[CloudinarySettings] = None):
        self._settings = settings or get_settings().cloudinary
        self._configured = False

    def _configure(self):
        """Configure Cloudinary SDK."""
        if not self._configured:
            cloudinary.config(
                cloud_name=self._settings.cloud_name,
                api_key=self._settings.api_key,
                api_secret=self._settings.api_secret,
                secure=True,
            )
            self._configured = True

    def public_id(self, bucket: str, path: str) -> str:
        """
        Build the Cloudinary public id for a bucket path.

        Format: {root_folder}/{bucket}/{path without extension}
        """
        stem = path.rsplit(".", 1)[0] if "." in path.rsplit("/", 1)[-1] else path
        return f"{self._settings.root_folder}/{bucket}/{stem}"

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        self._configure()
        public_id = self.public_id(bucket, path)

        try:
            result = cloudinary.uploader.upload(
                data,
                public_id=public_id,
                resource_type="image",
                overwrite=upsert,
                invalidate=upsert,
                unique_filename=False,
            )
        except CloudinaryError as e:
            raise StorageError(f"Cloudinary error: {e}") from e
        except Exception as e:
            raise StorageError(f"Failed to upload {bucket}/{path}: {e}") from e

        if not upsert and result.get("existing"):
            raise DuplicateError(f"Object already exists: {bucket}/{path}")

        return path

    async def get_public_url(self, bucket: str, path: str) -> str:
        self._configure()
        return CloudinaryImage(self.public_id(bucket, path)).build_url(secure=True)
