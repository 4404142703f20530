"""
Abstract Storage Interface

Abstract interfaces for the provider's tables and buckets.

Implementations:
- Supabase tables and Supabase Storage (supabase_tables, supabase_buckets)
- Cloudinary for objects (cloudinary_storage)
- In-memory versions of each (memory)

Ownership filtering is the caller's job: every read and delete takes
the owning user id.

Profiles are unique per id. Inserting a second profile for the same id
MUST raise DuplicateError - provisioning relies on it.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from storefront.models.account import Profile
from storefront.models.finance import Category, Transaction

RECEIPTS_BUCKET = "receipts"
AVATARS_BUCKET = "avatars"


class ProfileStorageInterface(ABC):
    """Storage for the profiles table."""

    @abstractmethod
    async def insert_profile(self, profile: Profile) -> Profile:
        """
        Insert a new profile.

        Raises:
            DuplicateError: A profile with this id already exists
            StorageError: Any other failure
        """
        pass

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[Profile]:
        pass

    @abstractmethod
    async def update_profile(self, user_id: str, fields: dict) -> Profile:
        """
        Apply a partial update.

        Raises:
            NotFoundError: No profile for this user
        """
        pass


class CategoryStorageInterface(ABC):
    """Storage for the categories table."""

    @abstractmethod
    async def list_categories(self, user_id: str) -> list[Category]:
        """All categories owned by the user, ordered by name."""
        pass

    @abstractmethod
    async def insert_category(self, category: Category) -> Category:
        pass

    @abstractmethod
    async def delete_category(self, category_id: str, user_id: str) -> bool:
        """
        Delete a category owned by the user.

        Returns:
            True if a row was deleted
        """
        pass


class TransactionStorageInterface(ABC):
    """Storage for the transactions table."""

    @abstractmethod
    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def list_transactions(
        self,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """
        List the user's transactions with their categories.

        Args:
            user_id: Owner
            date_from: Only transactions dated on or after this day
            date_to: Only transactions dated on or before this day
            limit: Maximum number of rows

        Returns:
            Transactions, newest created first
        """
        pass


class ObjectStorageInterface(ABC):
    """Storage for uploaded files (receipts, avatars)."""

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        """
        Upload a file.

        Args:
            bucket: Bucket name (RECEIPTS_BUCKET or AVATARS_BUCKET)
            path: Object path inside the bucket, prefixed with the user id
            data: File contents
            content_type: MIME type
            upsert: Replace an existing object at the same path

        Returns:
            The stored path

        Raises:
            DuplicateError: Object exists and upsert is False
            StorageError: Any other failure
        """
        pass

    @abstractmethod
    async def get_public_url(self, bucket: str, path: str) -> str:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
