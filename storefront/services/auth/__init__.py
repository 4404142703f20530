"""
Auth Services Package

Abstract provider interface, the Supabase implementation and an
in-memory implementation for tests and offline development.
"""

from storefront.services.auth.errors import (
    AuthError,
    AuthErrorKind,
    classify_auth_error,
    is_email_not_confirmed,
)
from storefront.services.auth.interface import (
    AuthListener,
    AuthProviderInterface,
    AuthSubscription,
)
from storefront.services.auth.memory import InMemoryAuthProvider
from storefront.services.auth.supabase_auth import SupabaseAuthProvider

__all__ = [
    # Errors
    "AuthError",
    "AuthErrorKind",
    "classify_auth_error",
    "is_email_not_confirmed",
    # Interface
    "AuthListener",
    "AuthProviderInterface",
    "AuthSubscription",
    # Implementations
    "InMemoryAuthProvider",
    "SupabaseAuthProvider",
]
