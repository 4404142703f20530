"""
Data Models Package

All Pydantic models used by Storefront. Rows coming back from the
provider are parsed into these before anything else touches them.
"""

from storefront.models.account import (
    SUPPORTED_CURRENCIES,
    AuthEvent,
    Identity,
    Profile,
    ProfileUpdate,
    SignUpResult,
)
from storefront.models.diagnostics import (
    ConfigSnapshot,
    DiagnosticResult,
    DiagnosticStatus,
    SessionSnapshot,
)
from storefront.models.finance import (
    DEFAULT_CATEGORY_COLOR,
    Category,
    CategoryDraft,
    DashboardData,
    DashboardStats,
    DayBucket,
    InputMethod,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    VoiceDraft,
)

__all__ = [
    # Account models
    "SUPPORTED_CURRENCIES",
    "AuthEvent",
    "Identity",
    "Profile",
    "ProfileUpdate",
    "SignUpResult",
    # Finance models
    "DEFAULT_CATEGORY_COLOR",
    "Category",
    "CategoryDraft",
    "DashboardData",
    "DashboardStats",
    "DayBucket",
    "InputMethod",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "VoiceDraft",
    # Diagnostics
    "ConfigSnapshot",
    "DiagnosticResult",
    "DiagnosticStatus",
    "SessionSnapshot",
]
