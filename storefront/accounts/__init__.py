"""
Accounts Package

Session lifecycle, email verification and profile provisioning.
"""

from storefront.accounts.provisioner import ProfileProvisioner
from storefront.accounts.session import SessionStore
from storefront.accounts.verification import (
    VerificationFlow,
    VerificationState,
    read_token,
)

__all__ = [
    "ProfileProvisioner",
    "SessionStore",
    "VerificationFlow",
    "VerificationState",
    "read_token",
]
