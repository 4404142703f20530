"""
Profile Provisioner

Creates the application-owned Profile row for a newly confirmed identity.

Exactly one profile per identity is enforced by the storage layer's
uniqueness constraint, not by the caller. A second attempt for the same
user id surfaces as DuplicateError and is treated as "already done":
the existing row is left untouched.
"""

from typing import Optional

from storefront.config import get_settings
from storefront.log import get_logger
from storefront.models.account import Profile
from storefront.services.storage import DuplicateError, ProfileStorageInterface


class ProfileProvisioner:
    """Inserts default profiles."""

    def __init__(
        self,
        storage: ProfileStorageInterface,
        default_currency: Optional[str] = None,
        default_language: Optional[str] = None,
    ):
        self._storage = storage
        if default_currency is None or default_language is None:
            app = get_settings().app
            default_currency = default_currency or app.default_currency
            default_language = default_language or app.default_language
        self._currency = default_currency
        self._language = default_language
        self._logger = get_logger(__name__)

    async def provision(
        self,
        user_id: str,
        email: str,
        full_name: str = "",
    ) -> Optional[Profile]:
        """
        Insert the profile for a user.

        Returns:
            The new profile, or None if one already existed

        Raises:
            StorageError: Any storage failure other than the duplicate
        """
        profile = Profile(
            id=user_id,
            email=email,
            full_name=full_name or "",
            currency=self._currency,
            language=self._language,
        )

        try:
            created = await self._storage.insert_profile(profile)
        except DuplicateError:
            self._logger.info("profile_already_exists", user_id=user_id)
            return None

        self._logger.info("profile_provisioned", user_id=user_id)
        return created
