"""
Auth Errors

The provider reports failures as a human-readable message plus, on newer
API versions, a machine-readable error code. We classify by code first and
only fall back to matching the message text when no known code is present.
Message matching is a compatibility shim: it breaks silently if the
provider rewords its messages.
"""

from enum import Enum
from typing import Optional


class AuthError(Exception):
    """A failed call to the auth provider."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
    ):
        self.message = message
        self.code = code
        self.status = status
        super().__init__(message)


class AuthErrorKind(str, Enum):
    ALREADY_CONFIRMED = "already_confirmed"
    EXPIRED = "expired"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    OTHER = "other"


_CODE_KINDS = {
    "email_already_confirmed": AuthErrorKind.ALREADY_CONFIRMED,
    "user_already_confirmed": AuthErrorKind.ALREADY_CONFIRMED,
    "otp_expired": AuthErrorKind.EXPIRED,
    "flow_state_expired": AuthErrorKind.EXPIRED,
    "email_not_confirmed": AuthErrorKind.EMAIL_NOT_CONFIRMED,
}

# Checked in order; first match wins
_MESSAGE_KINDS = [
    ("already been confirmed", AuthErrorKind.ALREADY_CONFIRMED),
    ("email not confirmed", AuthErrorKind.EMAIL_NOT_CONFIRMED),
    ("expired", AuthErrorKind.EXPIRED),
]


def classify_auth_error(error: AuthError) -> AuthErrorKind:
    """Decide what kind of failure the provider reported."""
    if error.code and error.code in _CODE_KINDS:
        return _CODE_KINDS[error.code]

    text = (error.message or "").lower()
    for needle, kind in _MESSAGE_KINDS:
        if needle in text:
            return kind

    return AuthErrorKind.OTHER


def is_email_not_confirmed(error: AuthError) -> bool:
    return classify_auth_error(error) == AuthErrorKind.EMAIL_NOT_CONFIRMED
