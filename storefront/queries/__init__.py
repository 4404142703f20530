"""Dashboard aggregation and queries."""

from storefront.queries.aggregator import (
    bucket_by_day,
    compute_stats,
    day_label,
    last_days_window,
)
from storefront.queries.dashboard import DashboardQuery

__all__ = [
    "DashboardQuery",
    "bucket_by_day",
    "compute_stats",
    "day_label",
    "last_days_window",
]
