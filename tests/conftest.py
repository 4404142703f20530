"""
Shared fixtures.

Everything runs against the in-memory provider and storage; no test
touches the network.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from storefront.accounts import ProfileProvisioner, SessionStore
from storefront.config import get_settings
from storefront.models.finance import Transaction, TransactionType
from storefront.services.auth import InMemoryAuthProvider
from storefront.services.storage import (
    InMemoryCategoryStorage,
    InMemoryObjectStorage,
    InMemoryProfileStorage,
    InMemoryTransactionStorage,
)

CONFIRM_URL = "http://localhost:8501/?view=confirm"

PROVIDER_ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "NEXT_PUBLIC_SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    "SITE_URL",
    "NEXT_PUBLIC_SITE_URL",
    "VERCEL_URL",
    "OBJECT_STORAGE_BACKEND",
    "DEBUG_MODE",
]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Each test starts from an empty environment and fresh settings."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_transaction(
    amount: str,
    type: TransactionType,
    on: date,
    user_id: str = "user-1",
    created_at: datetime = None,
    **extra,
) -> Transaction:
    return Transaction(
        id=str(uuid4()),
        user_id=user_id,
        amount=Decimal(amount),
        type=type,
        transaction_date=on,
        created_at=created_at or datetime.now(timezone.utc),
        **extra,
    )


@pytest.fixture
def auth():
    return InMemoryAuthProvider()


@pytest.fixture
def profiles():
    return InMemoryProfileStorage()


@pytest.fixture
def categories():
    return InMemoryCategoryStorage()


@pytest.fixture
def transactions(categories):
    return InMemoryTransactionStorage(categories)


@pytest.fixture
def objects():
    return InMemoryObjectStorage()


@pytest.fixture
def provisioner(profiles):
    return ProfileProvisioner(profiles, default_currency="USD", default_language="en")


@pytest.fixture
def session(auth, provisioner):
    store = SessionStore(auth, provisioner, confirmation_url=lambda: CONFIRM_URL)
    yield store
    store.close()


@pytest.fixture
def make_txn():
    return make_transaction
