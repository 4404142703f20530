"""
Diagnostic Models

The auth debug view runs small checks against the provider (send a
verification email, verify a token, try signing in) and keeps a list of
results. Results are newest-first and can be cleared.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from storefront.models.account import utc_now


class DiagnosticStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticResult(BaseModel):
    """One line in the diagnostics log."""

    id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=utc_now)
    test: str = Field(
        ...,
        description="Which check produced this (e.g. 'Email Verification')"
    )
    status: DiagnosticStatus
    message: str = Field(..., max_length=500)
    details: Optional[dict[str, Any]] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "result_id": str(self.id),
            "timestamp": self.timestamp.isoformat(),
            "test": self.test,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigSnapshot(BaseModel):
    """Provider configuration as shown in the debug view."""

    supabase_url: Optional[str] = None
    anon_key_preview: Optional[str] = None
    base_url: str
    expected_confirm_url: str
    timestamp: datetime = Field(default_factory=utc_now)
    issues: list[str] = Field(default_factory=list)


class SessionSnapshot(BaseModel):
    has_session: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    email_confirmed: bool = False
    error: Optional[str] = None
