"""
Account Models

Identity belongs to the auth provider - we only ever read it.
Profile belongs to us: one row per identity, created on first
confirmed sign-up and editable by its owner afterwards.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


SUPPORTED_CURRENCIES = {
    "USD": ("US Dollar", "$"),
    "EUR": ("Euro", "€"),
    "GBP": ("British Pound", "£"),
    "KES": ("Kenyan Shilling", "KSh"),
    "NGN": ("Nigerian Naira", "₦"),
    "ZAR": ("South African Rand", "R"),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthEvent(str, Enum):
    """
    Auth state transitions pushed by the provider.

    SIGNED_UP is emitted once an identity confirms its email for the
    first time - it is what triggers profile provisioning.
    """
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    SIGNED_UP = "SIGNED_UP"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


class Identity(BaseModel):
    """The authenticated principal as known to the auth provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque provider user id"
    )
    email: str
    full_name: str = Field(
        default="",
        description="Display name declared at sign-up"
    )
    email_confirmed_at: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_confirmed(self) -> bool:
        return self.email_confirmed_at is not None


class Profile(BaseModel):
    """Per-user settings record, one-to-one with Identity."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        description="Same as the owning Identity id"
    )
    email: str
    full_name: str = ""
    avatar_url: Optional[str] = None
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3
    )
    language: str = "en"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator('full_name', mode='before')
    @classmethod
    def null_name_is_empty(cls, v: Optional[str]) -> str:
        return v or ""

    @property
    def initials(self) -> str:
        parts = [p for p in self.full_name.split(" ") if p]
        return "".join(p[0] for p in parts).upper()[:2]


class ProfileUpdate(BaseModel):
    """Fields the owner may change from the settings view."""

    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(default="", max_length=200)
    currency: str = "USD"
    language: str = Field(default="en", min_length=2, max_length=10)

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.upper()
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Unsupported currency: {v}. Allowed: {sorted(SUPPORTED_CURRENCIES)}"
            )
        return v


class SignUpResult(BaseModel):
    """What the sign-up form needs to know after the provider answers."""

    identity: Optional[Identity] = None
    needs_confirmation: bool
    message: str
