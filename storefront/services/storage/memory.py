"""
In-memory storage implementations.

Used by the test suite and when the app runs without a provider.
They follow the same contracts as the hosted backends, including the
profile uniqueness constraint and newest-first transaction ordering.
"""

from datetime import date
from typing import Optional

from storefront.models.account import Profile, utc_now
from storefront.models.finance import Category, Transaction
from storefront.services.storage.interface import (
    CategoryStorageInterface,
    DuplicateError,
    NotFoundError,
    ObjectStorageInterface,
    ProfileStorageInterface,
    TransactionStorageInterface,
)


class InMemoryProfileStorage(ProfileStorageInterface):

    def __init__(self):
        self.profiles: dict[str, Profile] = {}
        self.insert_attempts = 0

    async def insert_profile(self, profile: Profile) -> Profile:
        self.insert_attempts += 1
        if profile.id in self.profiles:
            raise DuplicateError(f"Profile already exists: {profile.id}")
        self.profiles[profile.id] = profile
        return profile

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        return self.profiles.get(user_id)

    async def update_profile(self, user_id: str, fields: dict) -> Profile:
        current = self.profiles.get(user_id)
        if current is None:
            raise NotFoundError(f"Profile not found: {user_id}")
        changes = dict(fields)
        changes.setdefault("updated_at", utc_now())
        updated = Profile(**{**current.model_dump(), **changes})
        self.profiles[user_id] = updated
        return updated


class InMemoryCategoryStorage(CategoryStorageInterface):

    def __init__(self):
        self.categories: dict[str, Category] = {}

    async def list_categories(self, user_id: str) -> list[Category]:
        owned = [c for c in self.categories.values() if c.user_id == user_id]
        return sorted(owned, key=lambda c: c.name)

    async def insert_category(self, category: Category) -> Category:
        if category.id in self.categories:
            raise DuplicateError(f"Category already exists: {category.id}")
        self.categories[category.id] = category
        return category

    async def delete_category(self, category_id: str, user_id: str) -> bool:
        category = self.categories.get(category_id)
        if category is None or category.user_id != user_id:
            return False
        del self.categories[category_id]
        return True


class InMemoryTransactionStorage(TransactionStorageInterface):

    def __init__(self, categories: Optional[InMemoryCategoryStorage] = None):
        self.transactions: list[Transaction] = []
        self._categories = categories

    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        self.transactions.append(transaction.model_copy(update={"category": None}))
        return transaction

    def _with_category(self, transaction: Transaction) -> Transaction:
        if self._categories is None or not transaction.category_id:
            return transaction
        category = self._categories.categories.get(transaction.category_id)
        return transaction.model_copy(update={"category": category})

    async def list_transactions(
        self,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        rows = []
        for t in self.transactions:
            if t.user_id != user_id:
                continue
            if date_from and t.transaction_date < date_from:
                continue
            if date_to and t.transaction_date > date_to:
                continue
            rows.append(self._with_category(t))

        rows.sort(key=lambda t: t.created_at, reverse=True)
        return rows[:limit] if limit else rows


class InMemoryObjectStorage(ObjectStorageInterface):

    def __init__(self, base_url: str = "memory://storage"):
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self._base_url = base_url

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        key = (bucket, path)
        if key in self.objects and not upsert:
            raise DuplicateError(f"Object already exists: {bucket}/{path}")
        self.objects[key] = (data, content_type)
        return path

    async def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/{bucket}/{path}"
