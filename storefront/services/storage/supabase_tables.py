"""
Supabase Table Storage

Profiles, categories and transactions live in the provider's Postgres
tables and are reached through its REST query builder.

Row-level security on the provider side is assumed, but every query here
still filters by the owning user id.
"""

from datetime import date
from typing import Optional

from storefront.models.account import Profile, utc_now
from storefront.models.finance import Category, Transaction
from storefront.services.storage.interface import (
    CategoryStorageInterface,
    DuplicateError,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from storefront.services.supabase_client import SupabaseClient

PROFILES_TABLE = "profiles"
CATEGORIES_TABLE = "categories"
TRANSACTIONS_TABLE = "transactions"

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: Exception) -> bool:
    return str(getattr(error, "code", "")) == UNIQUE_VIOLATION


class SupabaseProfileStorage(ProfileStorageInterface):
    """Profiles table."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    async def insert_profile(self, profile: Profile) -> Profile:
        db = await self._client.connect()
        try:
            response = await db.table(PROFILES_TABLE).insert(
                profile.model_dump(mode="json")
            ).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateError(f"Profile already exists: {profile.id}") from e
            raise StorageError(f"Failed to create profile: {e}") from e

        return Profile(**response.data[0]) if response.data else profile

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        db = await self._client.connect()
        try:
            response = await (
                db.table(PROFILES_TABLE)
                .select("*")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StorageError(f"Failed to load profile: {e}") from e

        if not response.data:
            return None
        return Profile(**response.data[0])

    async def update_profile(self, user_id: str, fields: dict) -> Profile:
        db = await self._client.connect()
        payload = dict(fields)
        payload.setdefault("updated_at", utc_now().isoformat())
        try:
            response = await (
                db.table(PROFILES_TABLE)
                .update(payload)
                .eq("id", user_id)
                .execute()
            )
        except Exception as e:
            raise StorageError(f"Failed to update profile: {e}") from e

        if not response.data:
            raise NotFoundError(f"Profile not found: {user_id}")
        return Profile(**response.data[0])


class SupabaseCategoryStorage(CategoryStorageInterface):
    """Categories table."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    async def list_categories(self, user_id: str) -> list[Category]:
        db = await self._client.connect()
        try:
            response = await (
                db.table(CATEGORIES_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("name")
                .execute()
            )
        except Exception as e:
            raise StorageError(f"Failed to load categories: {e}") from e

        return [Category(**row) for row in response.data or []]

    async def insert_category(self, category: Category) -> Category:
        db = await self._client.connect()
        try:
            response = await db.table(CATEGORIES_TABLE).insert(
                category.model_dump(mode="json")
            ).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateError(f"Category already exists: {category.name}") from e
            raise StorageError(f"Failed to create category: {e}") from e

        return Category(**response.data[0]) if response.data else category

    async def delete_category(self, category_id: str, user_id: str) -> bool:
        db = await self._client.connect()
        try:
            response = await (
                db.table(CATEGORIES_TABLE)
                .delete()
                .eq("id", category_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            raise StorageError(f"Failed to delete category: {e}") from e

        return bool(response.data)


class SupabaseTransactionStorage(TransactionStorageInterface):
    """Transactions table, joined with categories on read."""

    SELECT_WITH_CATEGORY = "*, category:categories(*)"

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        db = await self._client.connect()
        row = transaction.model_dump(mode="json", exclude={"category"})
        try:
            response = await db.table(TRANSACTIONS_TABLE).insert(row).execute()
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}") from e

        return Transaction(**response.data[0]) if response.data else transaction

    async def list_transactions(
        self,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        db = await self._client.connect()
        query = (
            db.table(TRANSACTIONS_TABLE)
            .select(self.SELECT_WITH_CATEGORY)
            .eq("user_id", user_id)
        )
        if date_from:
            query = query.gte("transaction_date", date_from.isoformat())
        if date_to:
            query = query.lte("transaction_date", date_to.isoformat())
        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)

        try:
            response = await query.execute()
        except Exception as e:
            raise StorageError(f"Failed to load transactions: {e}") from e

        return [Transaction(**row) for row in response.data or []]
