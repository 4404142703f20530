"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the
provider's tables and file buckets. Supabase is the default backend;
Cloudinary can hold uploaded images instead.
"""

from storefront.services.storage.interface import (
    AVATARS_BUCKET,
    RECEIPTS_BUCKET,
    CategoryStorageInterface,
    DuplicateError,
    NotFoundError,
    ObjectStorageInterface,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from storefront.services.storage.memory import (
    InMemoryCategoryStorage,
    InMemoryObjectStorage,
    InMemoryProfileStorage,
    InMemoryTransactionStorage,
)
from storefront.services.storage.supabase_buckets import SupabaseObjectStorage
from storefront.services.storage.supabase_tables import (
    SupabaseCategoryStorage,
    SupabaseProfileStorage,
    SupabaseTransactionStorage,
)
from storefront.services.storage.cloudinary_storage import CloudinaryObjectStorage

__all__ = [
    # Interfaces
    "AVATARS_BUCKET",
    "RECEIPTS_BUCKET",
    "CategoryStorageInterface",
    "ObjectStorageInterface",
    "ProfileStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryCategoryStorage",
    "InMemoryObjectStorage",
    "InMemoryProfileStorage",
    "InMemoryTransactionStorage",
    # Supabase implementation
    "SupabaseCategoryStorage",
    "SupabaseObjectStorage",
    "SupabaseProfileStorage",
    "SupabaseTransactionStorage",
    # Cloudinary implementation
    "CloudinaryObjectStorage",
]
