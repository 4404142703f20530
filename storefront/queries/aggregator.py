"""
Transaction Aggregation

Pure functions over transactions that were already fetched for the
current user. Nothing here touches storage: if the fetch failed the
caller never gets this far.

Money stays Decimal throughout so totals are exact.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from storefront.models.finance import (
    DashboardStats,
    DayBucket,
    Transaction,
    TransactionType,
)

ZERO = Decimal("0")


def compute_stats(transactions: Iterable[Transaction]) -> DashboardStats:
    """
    Totals for the dashboard cards.

    net_profit is always total_income - total_expenses and
    transaction_count is the number of rows given. Empty input gives
    all zeros.
    """
    total_income = ZERO
    total_expenses = ZERO
    count = 0

    for t in transactions:
        count += 1
        if t.type == TransactionType.INCOME:
            total_income += t.amount
        elif t.type == TransactionType.EXPENSE:
            total_expenses += t.amount

    return DashboardStats(
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
        transaction_count=count,
    )


def day_label(day: date) -> str:
    """Short chart label, e.g. 'Oct 19'."""
    return day.strftime("%b %d")


def last_days_window(today: date, days: int = 7) -> tuple[date, date]:
    """Inclusive window of `days` calendar days ending today."""
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")
    return today - timedelta(days=days - 1), today


def bucket_by_day(
    transactions: Iterable[Transaction],
    window_start: date,
    window_end: date,
) -> list[DayBucket]:
    """
    One bucket per calendar day in [window_start, window_end].

    Buckets are in chronological order. Days without transactions are
    zero-filled; transactions dated outside the window are ignored.
    """
    if window_end < window_start:
        raise ValueError(
            f"window_end ({window_end}) is before window_start ({window_start})"
        )

    income: dict[date, Decimal] = {}
    expenses: dict[date, Decimal] = {}

    for t in transactions:
        day = t.transaction_date
        if day < window_start or day > window_end:
            continue
        if t.type == TransactionType.INCOME:
            income[day] = income.get(day, ZERO) + t.amount
        elif t.type == TransactionType.EXPENSE:
            expenses[day] = expenses.get(day, ZERO) + t.amount

    buckets = []
    day = window_start
    while day <= window_end:
        day_income = income.get(day, ZERO)
        day_expenses = expenses.get(day, ZERO)
        buckets.append(DayBucket(
            day=day,
            label=day_label(day),
            income=day_income,
            expenses=day_expenses,
            profit=day_income - day_expenses,
        ))
        day += timedelta(days=1)

    return buckets
