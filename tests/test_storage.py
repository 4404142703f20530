"""
Tests for storage backends.

The in-memory backends are tested directly. The Supabase adapters are
driven through a fake query builder that records the calls made and
returns canned rows, so no network is needed.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from storefront.models.account import Profile
from storefront.models.finance import Category, TransactionType
from storefront.services.storage import (
    AVATARS_BUCKET,
    DuplicateError,
    NotFoundError,
    StorageError,
    SupabaseCategoryStorage,
    SupabaseObjectStorage,
    SupabaseProfileStorage,
    SupabaseTransactionStorage,
)
from storefront.services.storage.cloudinary_storage import CloudinaryObjectStorage
from storefront.config import CloudinarySettings


# =============================================================================
# FAKE SUPABASE CLIENT
# =============================================================================

class FakeAPIError(Exception):
    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable builder; execute() returns the table's canned rows."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.ops = []

    def __getattr__(self, name):
        def op(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self
        return op

    async def execute(self):
        self.db.queries.append((self.table, self.ops))
        if self.db.error is not None:
            raise self.db.error
        return FakeResponse(self.db.rows.get(self.table, []))


class FakeBucket:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    async def upload(self, path, data, file_options):
        self.db.uploads.append((self.name, path, file_options))
        if self.db.error is not None:
            raise self.db.error

    async def get_public_url(self, path):
        return f"https://cdn.example.com/{self.name}/{path}"


class FakeStorage:
    def __init__(self, db):
        self.db = db

    def from_(self, name):
        return FakeBucket(self.db, name)


class FakeDB:
    def __init__(self, rows=None, error=None):
        self.rows = rows or {}
        self.error = error
        self.queries = []
        self.uploads = []
        self.storage = FakeStorage(self)

    def table(self, name):
        return FakeQuery(self, name)


class FakeClient:
    def __init__(self, db):
        self.db = db

    async def connect(self):
        return self.db


def op_names(query):
    return [name for name, _, _ in query[1]]


# =============================================================================
# IN-MEMORY
# =============================================================================

class TestInMemoryStorage:
    """Tests for the in-memory backends."""

    @pytest.mark.asyncio
    async def test_profile_uniqueness(self, profiles):
        await profiles.insert_profile(Profile(id="u", email="a@b.com"))
        with pytest.raises(DuplicateError):
            await profiles.insert_profile(Profile(id="u", email="x@b.com"))

    @pytest.mark.asyncio
    async def test_update_missing_profile(self, profiles):
        with pytest.raises(NotFoundError):
            await profiles.update_profile("nobody", {"full_name": "x"})

    @pytest.mark.asyncio
    async def test_update_profile(self, profiles):
        await profiles.insert_profile(Profile(id="u", email="a@b.com"))
        updated = await profiles.update_profile("u", {"full_name": "Ada", "currency": "EUR"})
        assert updated.full_name == "Ada"
        assert updated.currency == "EUR"

    @pytest.mark.asyncio
    async def test_categories_are_per_user_and_sorted(self, categories):
        for cid, uid, name in [("1", "u", "Rent"), ("2", "u", "Cakes"), ("3", "v", "Other")]:
            await categories.insert_category(
                Category(id=cid, user_id=uid, name=name, type=TransactionType.EXPENSE)
            )
        assert [c.name for c in await categories.list_categories("u")] == ["Cakes", "Rent"]
        assert await categories.delete_category("3", "u") is False
        assert await categories.delete_category("1", "u") is True

    @pytest.mark.asyncio
    async def test_transactions_filtering_and_order(self, transactions, categories, make_txn):
        await categories.insert_category(
            Category(id="c", user_id="user-1", name="Cakes", type=TransactionType.INCOME)
        )
        base = datetime(2024, 10, 19, tzinfo=timezone.utc)
        older = make_txn("1", TransactionType.INCOME, date(2024, 10, 10), created_at=base)
        newer = make_txn(
            "2", TransactionType.INCOME, date(2024, 10, 18),
            created_at=base + timedelta(minutes=1), category_id="c",
        )
        other_user = make_txn("3", TransactionType.INCOME, date(2024, 10, 18), user_id="user-2")
        for t in (older, newer, other_user):
            await transactions.insert_transaction(t)

        rows = await transactions.list_transactions("user-1")
        assert [r.id for r in rows] == [newer.id, older.id]
        assert rows[0].category.name == "Cakes"

        windowed = await transactions.list_transactions("user-1", date_from=date(2024, 10, 15))
        assert [r.id for r in windowed] == [newer.id]

        limited = await transactions.list_transactions("user-1", limit=1)
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_objects(self, objects):
        await objects.upload(AVATARS_BUCKET, "u/avatar.png", b"1", "image/png")
        with pytest.raises(DuplicateError):
            await objects.upload(AVATARS_BUCKET, "u/avatar.png", b"2", "image/png")
        await objects.upload(AVATARS_BUCKET, "u/avatar.png", b"2", "image/png", upsert=True)
        assert objects.objects[(AVATARS_BUCKET, "u/avatar.png")][0] == b"2"
        assert await objects.get_public_url(AVATARS_BUCKET, "u/avatar.png") == "memory://storage/avatars/u/avatar.png"


# =============================================================================
# SUPABASE ADAPTERS
# =============================================================================

class TestSupabaseProfileStorage:
    """Tests for the profiles table adapter."""

    @pytest.mark.asyncio
    async def test_unique_violation_is_duplicate(self):
        db = FakeDB(error=FakeAPIError("duplicate key value", code="23505"))
        storage = SupabaseProfileStorage(FakeClient(db))
        with pytest.raises(DuplicateError):
            await storage.insert_profile(Profile(id="u", email="a@b.com"))

    @pytest.mark.asyncio
    async def test_other_errors(self):
        db = FakeDB(error=FakeAPIError("permission denied", code="42501"))
        storage = SupabaseProfileStorage(FakeClient(db))
        with pytest.raises(StorageError) as exc_info:
            await storage.insert_profile(Profile(id="u", email="a@b.com"))
        assert not isinstance(exc_info.value, DuplicateError)

    @pytest.mark.asyncio
    async def test_get_profile(self):
        db = FakeDB(rows={"profiles": [{"id": "u", "email": "a@b.com", "full_name": None}]})
        storage = SupabaseProfileStorage(FakeClient(db))

        profile = await storage.get_profile("u")

        assert profile.full_name == ""
        assert ("eq", ("id", "u"), {}) in db.queries[0][1]

    @pytest.mark.asyncio
    async def test_update_missing_profile(self):
        storage = SupabaseProfileStorage(FakeClient(FakeDB()))
        with pytest.raises(NotFoundError):
            await storage.update_profile("u", {"full_name": "Ada"})

    @pytest.mark.asyncio
    async def test_update_sends_timestamp(self):
        db = FakeDB(rows={"profiles": [{"id": "u", "email": "a@b.com"}]})
        storage = SupabaseProfileStorage(FakeClient(db))
        await storage.update_profile("u", {"full_name": "Ada"})

        name, args, _ = db.queries[0][1][0]
        assert name == "update"
        assert args[0]["full_name"] == "Ada"
        assert isinstance(args[0]["updated_at"], str)


class TestSupabaseTransactionStorage:
    """Tests for the transactions table adapter."""

    @pytest.mark.asyncio
    async def test_list_builds_query(self):
        row = {
            "id": "t",
            "user_id": "u",
            "amount": 12.5,
            "type": "income",
            "transaction_date": "2024-10-19",
            "created_at": "2024-10-19T10:00:00+00:00",
            "updated_at": "2024-10-19T10:00:00+00:00",
            "category": None,
        }
        db = FakeDB(rows={"transactions": [row]})
        storage = SupabaseTransactionStorage(FakeClient(db))

        rows = await storage.list_transactions(
            "u", date_from=date(2024, 10, 13), date_to=date(2024, 10, 19), limit=5
        )

        assert rows[0].amount == 12.5
        ops = db.queries[0][1]
        assert ("select", ("*, category:categories(*)",), {}) in ops
        assert ("gte", ("transaction_date", "2024-10-13"), {}) in ops
        assert ("lte", ("transaction_date", "2024-10-19"), {}) in ops
        assert ("order", ("created_at",), {"desc": True}) in ops
        assert ("limit", (5,), {}) in ops

    @pytest.mark.asyncio
    async def test_insert_excludes_joined_category(self, make_txn):
        db = FakeDB()
        storage = SupabaseTransactionStorage(FakeClient(db))
        t = make_txn("5", TransactionType.EXPENSE, date(2024, 10, 19))

        await storage.insert_transaction(t)

        _, args, _ = db.queries[0][1][0]
        assert "category" not in args[0]
        assert args[0]["amount"] == "5"

    @pytest.mark.asyncio
    async def test_errors_become_storage_errors(self):
        storage = SupabaseTransactionStorage(FakeClient(FakeDB(error=FakeAPIError("timeout"))))
        with pytest.raises(StorageError):
            await storage.list_transactions("u")


class TestSupabaseCategoryStorage:

    @pytest.mark.asyncio
    async def test_delete_filters_by_owner(self):
        db = FakeDB(rows={"categories": [{"id": "c"}]})
        storage = SupabaseCategoryStorage(FakeClient(db))

        assert await storage.delete_category("c", "u") is True
        ops = db.queries[0][1]
        assert ("eq", ("id", "c"), {}) in ops
        assert ("eq", ("user_id", "u"), {}) in ops


class TestSupabaseObjectStorage:

    @pytest.mark.asyncio
    async def test_upload_options(self):
        db = FakeDB()
        storage = SupabaseObjectStorage(FakeClient(db))

        path = await storage.upload(AVATARS_BUCKET, "u/avatar.png", b"x", "image/png", upsert=True)

        assert path == "u/avatar.png"
        assert db.uploads == [(AVATARS_BUCKET, "u/avatar.png", {"content-type": "image/png", "upsert": "true"})]
        assert await storage.get_public_url(AVATARS_BUCKET, path) == "https://cdn.example.com/avatars/u/avatar.png"

    @pytest.mark.asyncio
    async def test_existing_object(self):
        storage = SupabaseObjectStorage(FakeClient(FakeDB(error=FakeAPIError("The resource already exists"))))
        with pytest.raises(DuplicateError):
            await storage.upload(AVATARS_BUCKET, "u/a.png", b"x", "image/png")


class TestCloudinaryObjectStorage:

    def test_public_id(self):
        storage = CloudinaryObjectStorage(
            CloudinarySettings(cloud_name="demo", api_key="k", api_secret="s")
        )
        assert storage.public_id("receipts", "u/1700000000000.jpg") == "storefront/receipts/u/1700000000000"
        assert storage.public_id("avatars", "u/avatar") == "storefront/avatars/u/avatar"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
