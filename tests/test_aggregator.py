"""
Tests for transaction aggregation.

compute_stats and bucket_by_day are pure, so these build transactions
directly and check the numbers.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from storefront.models.finance import DashboardStats, TransactionType
from storefront.queries import bucket_by_day, compute_stats, day_label, last_days_window

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE
TODAY = date(2024, 10, 19)


class TestComputeStats:
    """Tests for dashboard totals."""

    def test_empty_list_is_all_zeros(self):
        """No transactions gives zero everywhere."""
        stats = compute_stats([])
        assert stats == DashboardStats()
        assert stats.total_income == 0
        assert stats.total_expenses == 0
        assert stats.net_profit == 0
        assert stats.transaction_count == 0

    def test_sums_by_type(self, make_txn):
        """Income and expenses are summed separately."""
        rows = [
            make_txn("100.00", INCOME, TODAY),
            make_txn("50.50", INCOME, TODAY),
            make_txn("30.25", EXPENSE, TODAY),
        ]
        stats = compute_stats(rows)
        assert stats.total_income == Decimal("150.50")
        assert stats.total_expenses == Decimal("30.25")
        assert stats.net_profit == Decimal("120.25")
        assert stats.transaction_count == 3

    def test_net_profit_can_be_negative(self, make_txn):
        """Spending more than earning gives a loss."""
        rows = [
            make_txn("10", INCOME, TODAY),
            make_txn("25", EXPENSE, TODAY),
        ]
        assert compute_stats(rows).net_profit == Decimal("-15")

    @pytest.mark.parametrize("amounts", [
        [("1", INCOME)],
        [("0.01", EXPENSE), ("0.02", EXPENSE)],
        [("999.99", INCOME), ("0.01", EXPENSE), ("12", INCOME), ("7.5", EXPENSE)],
    ])
    def test_totals_are_consistent(self, amounts, make_txn):
        """net_profit = income - expenses and count = length, whatever the input."""
        rows = [make_txn(a, t, TODAY) for a, t in amounts]
        stats = compute_stats(rows)
        assert stats.total_income - stats.total_expenses == stats.net_profit
        assert stats.transaction_count == len(rows)

    def test_decimal_sums_are_exact(self, make_txn):
        """0.1 + 0.2 is exactly 0.3."""
        rows = [
            make_txn("0.1", INCOME, TODAY),
            make_txn("0.2", INCOME, TODAY),
        ]
        assert compute_stats(rows).total_income == Decimal("0.3")


class TestBucketByDay:
    """Tests for the daily chart series."""

    def test_seven_day_window_always_has_seven_entries(self):
        """A 7-day window gives 7 buckets even with no data."""
        start, end = last_days_window(TODAY, 7)
        buckets = bucket_by_day([], start, end)
        assert len(buckets) == 7
        assert all(b.income == 0 and b.expenses == 0 and b.profit == 0 for b in buckets)

    def test_buckets_are_chronological(self):
        """First bucket is the window start, last is the window end."""
        start, end = last_days_window(TODAY, 7)
        buckets = bucket_by_day([], start, end)
        days = [b.day for b in buckets]
        assert days == sorted(days)
        assert days[0] == TODAY - timedelta(days=6)
        assert days[-1] == TODAY

    def test_many_transactions_on_one_day(self, make_txn):
        """Several rows on the same day are summed into one bucket."""
        start, end = last_days_window(TODAY, 7)
        rows = [
            make_txn("10", INCOME, TODAY),
            make_txn("20", INCOME, TODAY),
            make_txn("5", EXPENSE, TODAY),
            make_txn("3", EXPENSE, TODAY - timedelta(days=2)),
        ]
        buckets = bucket_by_day(rows, start, end)
        assert len(buckets) == 7

        last = buckets[-1]
        assert last.income == Decimal("30")
        assert last.expenses == Decimal("5")
        assert last.profit == Decimal("25")

        two_days_ago = buckets[-3]
        assert two_days_ago.expenses == Decimal("3")
        assert two_days_ago.profit == Decimal("-3")

    def test_rows_outside_window_are_ignored(self, make_txn):
        """Transactions before the start or after the end don't count."""
        start, end = last_days_window(TODAY, 7)
        rows = [
            make_txn("100", INCOME, start - timedelta(days=1)),
            make_txn("100", INCOME, end + timedelta(days=1)),
        ]
        buckets = bucket_by_day(rows, start, end)
        assert sum(b.income for b in buckets) == 0

    def test_arbitrary_window(self):
        """Any inclusive window works, including a single day."""
        buckets = bucket_by_day([], date(2024, 2, 27), date(2024, 3, 2))
        assert [b.day.day for b in buckets] == [27, 28, 29, 1, 2]

        single = bucket_by_day([], TODAY, TODAY)
        assert len(single) == 1

    def test_reversed_window_is_rejected(self):
        """End before start is a caller bug."""
        with pytest.raises(ValueError):
            bucket_by_day([], TODAY, TODAY - timedelta(days=1))

    def test_labels(self):
        """Labels are short month + day."""
        assert day_label(date(2024, 10, 19)) == "Oct 19"
        assert day_label(date(2024, 3, 5)) == "Mar 05"
        buckets = bucket_by_day([], TODAY, TODAY)
        assert buckets[0].label == "Oct 19"


class TestLastDaysWindow:
    """Tests for the chart window helper."""

    def test_includes_today(self):
        """The window ends today and spans `days` days."""
        assert last_days_window(TODAY, 7) == (date(2024, 10, 13), TODAY)
        assert last_days_window(TODAY, 1) == (TODAY, TODAY)

    def test_rejects_empty_window(self):
        """Zero days is not a window."""
        with pytest.raises(ValueError):
            last_days_window(TODAY, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
