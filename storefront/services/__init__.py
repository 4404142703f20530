"""Services package."""

from storefront.services.auth import (
    AuthError,
    AuthErrorKind,
    AuthProviderInterface,
    InMemoryAuthProvider,
    SupabaseAuthProvider,
    classify_auth_error,
)
from storefront.services.image import (
    ImageInfo,
    ImageTooLargeError,
    InvalidImageError,
    inspect_image,
)
from storefront.services.storage import (
    CategoryStorageInterface,
    DuplicateError,
    NotFoundError,
    ObjectStorageInterface,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from storefront.services.supabase_client import ConfigurationError, SupabaseClient

__all__ = [
    # Auth services
    "AuthError",
    "AuthErrorKind",
    "AuthProviderInterface",
    "InMemoryAuthProvider",
    "SupabaseAuthProvider",
    "classify_auth_error",
    # Image services
    "ImageInfo",
    "ImageTooLargeError",
    "InvalidImageError",
    "inspect_image",
    # Storage services
    "CategoryStorageInterface",
    "DuplicateError",
    "NotFoundError",
    "ObjectStorageInterface",
    "ProfileStorageInterface",
    "StorageError",
    "TransactionStorageInterface",
    # Provider client
    "ConfigurationError",
    "SupabaseClient",
]
