"""
Main Orchestrator for Storefront

This module ties together all the components and defines the
end-to-end flows for:
1. Adding a transaction (form/voice/photo -> validate -> upload receipt -> insert)
2. Profile & settings (load, update, avatar upload, categories)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is sent to the provider until local validation passes
- Uploads are inspected before they leave the session
- Rows are always written for the signed-in user's id

create_app_components() wires the Supabase-backed services when the
provider is configured and falls back to in-memory ones otherwise.
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, MutableMapping, Optional
from uuid import uuid4

from storefront.accounts import ProfileProvisioner, SessionStore
from storefront.capture import parse_voice_transcript
from storefront.config import get_confirmation_url, get_settings, validate_auth_config
from storefront.log import get_logger
from storefront.models.account import Profile, ProfileUpdate, utc_now
from storefront.models.finance import (
    Category,
    CategoryDraft,
    InputMethod,
    Transaction,
    TransactionDraft,
    ValidationResult,
)
from storefront.queries import DashboardQuery
from storefront.services.auth import AuthProviderInterface, InMemoryAuthProvider, SupabaseAuthProvider
from storefront.services.image import inspect_image
from storefront.services.storage import (
    AVATARS_BUCKET,
    RECEIPTS_BUCKET,
    CategoryStorageInterface,
    CloudinaryObjectStorage,
    InMemoryCategoryStorage,
    InMemoryObjectStorage,
    InMemoryProfileStorage,
    InMemoryTransactionStorage,
    ObjectStorageInterface,
    ProfileStorageInterface,
    SupabaseCategoryStorage,
    SupabaseObjectStorage,
    SupabaseProfileStorage,
    SupabaseTransactionStorage,
    TransactionStorageInterface,
)
from storefront.services.supabase_client import SupabaseClient
from storefront.state import ThemeStore
from storefront.validation import TransactionValidator, parse_amount


class FormValidationError(Exception):
    """A form failed local validation; nothing was sent."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.error_messages) or "Validation failed")


class TransactionFlow:
    """
    Orchestrates adding a transaction.

    Flow:
    1. Build a draft (manual form, voice transcript or photo)
    2. Validate locally -> FormValidationError blocks the submit
    3. Inspect and upload the receipt photo, if any
    4. Insert the row for the signed-in user
    """

    def __init__(
        self,
        transactions: TransactionStorageInterface,
        categories: CategoryStorageInterface,
        objects: ObjectStorageInterface,
        validator: Optional[TransactionValidator] = None,
        max_receipt_bytes: Optional[int] = None,
    ):
        self._transactions = transactions
        self._categories = categories
        self._objects = objects
        self._validator = validator or TransactionValidator()
        self._max_receipt_bytes = max_receipt_bytes or get_settings().app.max_receipt_size_bytes
        self._logger = get_logger(__name__)

    async def list_categories(self, user_id: str) -> list[Category]:
        return await self._categories.list_categories(user_id)

    def draft_from_voice(self, transcript: str) -> TransactionDraft:
        """Prefill a draft from a spoken sentence. Unrecognised parts stay at defaults."""
        parsed = parse_voice_transcript(transcript)
        draft = TransactionDraft(
            amount=parsed.amount or "",
            description=parsed.description,
            input_method=InputMethod.VOICE,
        )
        if parsed.type is not None:
            draft.type = parsed.type
        return draft

    def draft_from_photo(self, filename: str) -> TransactionDraft:
        return TransactionDraft(
            description=f"Receipt uploaded: {filename}",
            input_method=InputMethod.PHOTO,
        )

    def validate(self, draft: TransactionDraft, today: Optional[date] = None) -> ValidationResult:
        return self._validator.validate_transaction(draft, today=today)

    async def upload_receipt(self, user_id: str, data: bytes, filename: str) -> str:
        """
        Store a receipt photo and return its public URL.

        Path: {user_id}/{epoch milliseconds}.{ext}
        """
        info = inspect_image(data, self._max_receipt_bytes, filename=filename)
        path = f"{user_id}/{int(time.time() * 1000)}.{info.extension}"

        await self._objects.upload(RECEIPTS_BUCKET, path, data, info.mime_type)
        url = await self._objects.get_public_url(RECEIPTS_BUCKET, path)

        self._logger.info("receipt_uploaded", user_id=user_id, path=path, size_bytes=info.size_bytes)
        return url

    async def add_transaction(
        self,
        user_id: str,
        draft: TransactionDraft,
        receipt: Optional[tuple[bytes, str]] = None,
        today: Optional[date] = None,
    ) -> Transaction:
        """
        Validate and record a transaction.

        Args:
            user_id: Signed-in user's id
            draft: Form contents
            receipt: Optional (bytes, filename) of a receipt photo
            today: Date used when the draft has none

        Raises:
            FormValidationError: The draft has blocking issues
            InvalidImageError: The receipt is not an acceptable image
            StorageError: Upload or insert failed
        """
        today = today or date.today()
        result = self.validate(draft, today=today)
        if not result.is_valid:
            raise FormValidationError(result)

        receipt_url = None
        if receipt is not None:
            data, filename = receipt
            receipt_url = await self.upload_receipt(user_id, data, filename)

        now = utc_now()
        transaction = Transaction(
            id=str(uuid4()),
            user_id=user_id,
            category_id=draft.category_id,
            amount=parse_amount(draft.amount),
            description=draft.description or None,
            type=draft.type,
            input_method=draft.input_method,
            receipt_image_url=receipt_url,
            transaction_date=draft.transaction_date or today,
            created_at=now,
            updated_at=now,
        )

        saved = await self._transactions.insert_transaction(transaction)
        self._logger.info(
            "transaction_added",
            user_id=user_id,
            transaction_id=saved.id,
            type=saved.type.value,
            input_method=saved.input_method.value,
        )
        return saved


class ProfileFlow:
    """
    Orchestrates the profile & settings view.

    The user may only touch their own profile row and categories;
    every call takes the signed-in user's id.
    """

    def __init__(
        self,
        profiles: ProfileStorageInterface,
        categories: CategoryStorageInterface,
        objects: ObjectStorageInterface,
        validator: Optional[TransactionValidator] = None,
        max_avatar_bytes: Optional[int] = None,
    ):
        self._profiles = profiles
        self._categories = categories
        self._objects = objects
        self._validator = validator or TransactionValidator()
        self._max_avatar_bytes = max_avatar_bytes or get_settings().app.max_avatar_size_bytes
        self._logger = get_logger(__name__)

    async def load_profile(self, user_id: str) -> Optional[Profile]:
        return await self._profiles.get_profile(user_id)

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> Profile:
        profile = await self._profiles.update_profile(user_id, update.model_dump())
        self._logger.info("profile_updated", user_id=user_id)
        return profile

    async def upload_avatar(self, user_id: str, data: bytes, filename: str) -> Profile:
        """
        Replace the user's avatar and point the profile at it.

        Path: {user_id}/avatar.{ext}, overwritten on each upload.
        """
        info = inspect_image(data, self._max_avatar_bytes, filename=filename)
        path = f"{user_id}/avatar.{info.extension}"

        await self._objects.upload(AVATARS_BUCKET, path, data, info.mime_type, upsert=True)
        url = await self._objects.get_public_url(AVATARS_BUCKET, path)

        profile = await self._profiles.update_profile(user_id, {"avatar_url": url})
        self._logger.info("avatar_uploaded", user_id=user_id, path=path)
        return profile

    async def list_categories(self, user_id: str) -> list[Category]:
        return await self._categories.list_categories(user_id)

    async def add_category(self, user_id: str, draft: CategoryDraft) -> Category:
        existing = await self._categories.list_categories(user_id)
        result = self._validator.validate_category_name(
            draft.name,
            [c.name for c in existing],
        )
        if not result.is_valid:
            raise FormValidationError(result)

        category = Category(
            id=str(uuid4()),
            user_id=user_id,
            name=draft.name,
            type=draft.type,
            color=draft.color,
        )
        saved = await self._categories.insert_category(category)
        self._logger.info("category_added", user_id=user_id, category_id=saved.id)
        return saved

    async def delete_category(self, user_id: str, category_id: str) -> bool:
        deleted = await self._categories.delete_category(category_id, user_id)
        self._logger.info(
            "category_deleted",
            user_id=user_id,
            category_id=category_id,
            deleted=deleted,
        )
        return deleted


@dataclass
class AppComponents:
    """Everything one browser session needs."""

    auth: AuthProviderInterface
    session: SessionStore
    theme: ThemeStore
    transactions: TransactionFlow
    profiles: ProfileFlow
    dashboard: DashboardQuery
    backend: str

    def close(self) -> None:
        self.session.close()
        close_auth = getattr(self.auth, "close", None)
        if close_auth is not None:
            close_auth()


def _object_storage(client: SupabaseClient) -> ObjectStorageInterface:
    if get_settings().app.object_storage_backend == "cloudinary":
        return CloudinaryObjectStorage()
    return SupabaseObjectStorage(client)


def create_app_components(
    use_backend: bool = True,
    origin: Optional[str] = None,
    preferences: Optional[MutableMapping[str, str]] = None,
    prefers_dark: Callable[[], bool] = lambda: False,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_backend: Whether to use the hosted provider.
                     Set to False for testing without a network.
        origin: Origin of the current page, used in verification links
        preferences: Where the theme store persists its choices

    Returns:
        AppComponents wired to Supabase, or to in-memory services if
        the provider is not configured
    """
    logger = get_logger(__name__)
    backend = "memory"

    if use_backend:
        check = validate_auth_config()
        if check["is_valid"]:
            backend = "supabase"
        else:
            logger.warning("provider_not_configured", issues=check["issues"])

    if backend == "supabase":
        client = SupabaseClient()
        auth = SupabaseAuthProvider(client)
        profiles = SupabaseProfileStorage(client)
        categories = SupabaseCategoryStorage(client)
        transactions = SupabaseTransactionStorage(client)
        objects = _object_storage(client)
    else:
        auth = InMemoryAuthProvider()
        profiles = InMemoryProfileStorage()
        categories = InMemoryCategoryStorage()
        transactions = InMemoryTransactionStorage(categories)
        objects = InMemoryObjectStorage()

    validator = TransactionValidator()
    session = SessionStore(
        auth,
        ProfileProvisioner(profiles),
        confirmation_url=lambda: get_confirmation_url(origin),
    )

    logger.info("app_components_created", backend=backend)

    return AppComponents(
        auth=auth,
        session=session,
        theme=ThemeStore(preferences, prefers_dark=prefers_dark),
        transactions=TransactionFlow(transactions, categories, objects, validator),
        profiles=ProfileFlow(profiles, categories, objects, validator),
        dashboard=DashboardQuery(transactions),
        backend=backend,
    )
