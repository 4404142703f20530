"""
Dashboard Query

Fetches the user's transactions and shapes them for the dashboard:
- stats over every transaction the user has
- the most recent few, newest first
- a daily income/expense series for the chart window

A failed fetch is not an error for the page. The affected part falls
back to zeros or an empty list and the failure is logged.
"""

from datetime import date
from typing import Optional

from storefront.config import get_settings
from storefront.log import get_logger
from storefront.models.finance import DashboardData, DashboardStats, DayBucket
from storefront.queries.aggregator import bucket_by_day, compute_stats, last_days_window
from storefront.services.storage import StorageError, TransactionStorageInterface
from storefront.services.supabase_client import ConfigurationError


class DashboardQuery:
    """Loads DashboardData for one user."""

    def __init__(
        self,
        storage: TransactionStorageInterface,
        recent_limit: Optional[int] = None,
        window_days: Optional[int] = None,
    ):
        self._storage = storage
        if recent_limit is None or window_days is None:
            app = get_settings().app
            recent_limit = recent_limit or app.recent_transactions_limit
            window_days = window_days or app.chart_window_days
        self._recent_limit = recent_limit
        self._window_days = window_days
        self._logger = get_logger(__name__)

    async def load(self, user_id: str, today: Optional[date] = None) -> DashboardData:
        today = today or date.today()
        data = DashboardData()

        try:
            transactions = await self._storage.list_transactions(user_id)
        except (StorageError, ConfigurationError) as e:
            self._logger.error("dashboard_fetch_failed", user_id=user_id, error=str(e))
            data.stats = DashboardStats()
            data.fetch_failed = True
        else:
            data.stats = compute_stats(transactions)
            data.recent = transactions[: self._recent_limit]

        data.chart = await self.load_chart(user_id, today)
        data.chart_failed = not data.chart
        return data

    async def load_chart(self, user_id: str, today: Optional[date] = None) -> list[DayBucket]:
        """Daily series for the last `window_days` days, zero-filled. Empty if the fetch fails."""
        window_start, window_end = last_days_window(today or date.today(), self._window_days)

        try:
            transactions = await self._storage.list_transactions(
                user_id,
                date_from=window_start,
                date_to=window_end,
            )
        except (StorageError, ConfigurationError) as e:
            self._logger.error("chart_fetch_failed", user_id=user_id, error=str(e))
            return []

        return bucket_by_day(transactions, window_start, window_end)
