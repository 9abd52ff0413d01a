"""Sales domain module.

This module turns per-branch sales fetches into chart-ready data:

- **SalesSeries**: one row per calendar day, one column per branch in scope,
  dense (days without sales are 0.0).
- **Recent sales**: every branch's sales merged, newest first, capped.

Example:
    >>> import asyncio
    >>> from pos_dashboard.sales import build_series
    >>>
    >>> series = asyncio.run(build_series(client, catalog, catalog.get_scope(), days=30))
    >>> series.to_frame().tail()
"""

from pos_dashboard.sales.recent import RecentSalesConsolidator, recent_sales
from pos_dashboard.sales.series import BRANCH_COLORS, TimeSeriesAggregator, build_series

__all__ = ["BRANCH_COLORS", "RecentSalesConsolidator", "TimeSeriesAggregator", "build_series", "recent_sales"]
