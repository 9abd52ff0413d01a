"""Daily sales time series across branches.

Builds one row per calendar day with one column per branch in scope, from
independent per-branch sales fetches. A branch whose fetch fails is shown
with zero sales rather than breaking the chart.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING

import pandas as pd

from pos_dashboard.fanout import gather_settled
from pos_dashboard.models import Branch, ChartRow, SalesSeries, SaleRecord, Scope, SeriesBranch
from pos_dashboard.utils import date_window, format_date, iter_days

if TYPE_CHECKING:
    from pos_dashboard.branches import BranchCatalog
    from pos_dashboard.client import BranchDataSource

logger = logging.getLogger(__name__)

# Branch colors for multi-branch charts, assigned in catalog order
BRANCH_COLORS = [
    "#8b5cf6",  # violet
    "#f59e0b",  # amber
    "#10b981",  # emerald
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#f97316",  # orange
    "#14b8a6",  # teal
    "#a855f7",  # purple
]


def assign_colors(branches: Sequence[Branch]) -> tuple[SeriesBranch, ...]:
    """Pair each branch with a palette color by position, cycling through the palette."""
    return tuple(
        SeriesBranch(branch=branch, color=BRANCH_COLORS[idx % len(BRANCH_COLORS)])
        for idx, branch in enumerate(branches)
    )


def daily_totals(
    sales_by_branch: Sequence[tuple[Branch, Sequence[SaleRecord]]],
    days: Sequence[str],
) -> pd.DataFrame:
    """Sum sales per (day, branch) into a dense table.

    A sale belongs to a day when its ``sale_date`` string starts with that
    day's YYYY-MM-DD form. Sales outside ``days`` are dropped.

    Args:
        sales_by_branch: (branch, sales) pairs in the desired column order.
        days: Day strings (YYYY-MM-DD) in the desired row order.

    Returns:
        DataFrame indexed by day string with one float column per branch id.
        Every cell is filled; days without sales are 0.0.

    """
    branch_ids = [branch.id for branch, _ in sales_by_branch]
    records = [
        {"day": sale.sale_date[:10], "branch_id": branch.id, "grand_total": sale.grand_total}
        for branch, sales in sales_by_branch
        for sale in sales
    ]

    if not records:
        return pd.DataFrame(0.0, index=pd.Index(days, name="day"), columns=branch_ids)

    df = pd.DataFrame.from_records(records)
    pivot = df.pivot_table(
        index="day",
        columns="branch_id",
        values="grand_total",
        aggfunc="sum",
        fill_value=0.0,
    )
    pivot = pivot.reindex(index=days, columns=branch_ids, fill_value=0.0)
    pivot.index.name = "day"
    return pivot.fillna(0.0).astype(float)


class TimeSeriesAggregator:
    """Builds the multi-branch daily sales chart.

    Example:
        >>> aggregator = TimeSeriesAggregator(client, catalog)
        >>> series = asyncio.run(aggregator.build_series(Scope.company_wide(), days=7))
        >>> len(series.rows)
        7

    """

    def __init__(
        self,
        source: BranchDataSource,
        catalog: BranchCatalog,
        *,
        max_concurrency: int | None = None,
    ) -> None:
        self.source = source
        self.catalog = catalog
        self.max_concurrency = max_concurrency

    async def build_series(
        self,
        scope: Scope,
        days: int = 30,
        *,
        today: date | None = None,
    ) -> SalesSeries:
        """Build the dense daily series for the last ``days`` days.

        Args:
            scope: Company-wide or single-branch scope.
            days: Number of calendar days, ending today (>= 1).
            today: Override for the viewer's local date.

        Returns:
            SalesSeries with exactly ``days`` rows in ascending date order and
            a value for every branch in scope on every row.

        Raises:
            ValueError: If days is smaller than 1.

        """
        start, end = date_window(days, today)
        day_list = list(iter_days(start, end))
        day_strings = [format_date(d) for d in day_list]

        branches = await self.catalog.resolve_branches(scope)
        logger.info(
            "Building %d-day sales series (%s to %s) for %s over %d branch(es)",
            days,
            day_strings[0],
            day_strings[-1],
            scope,
            len(branches),
        )

        outcomes = await gather_settled(
            branches,
            lambda branch: self.source.sales_in_range(branch.id, start, end),
            label="sales",
            limit=self.max_concurrency,
        )
        sales_by_branch = [(o.branch, o.value if o.ok else []) for o in outcomes]

        table = daily_totals(sales_by_branch, day_strings)
        rows = tuple(
            ChartRow(day=day, totals={b.id: float(table.at[day_str, b.id]) for b in branches})
            for day, day_str in zip(day_list, day_strings)
        )
        return SalesSeries(start=start, end=end, rows=rows, branches=assign_colors(branches))


async def build_series(
    source: BranchDataSource,
    catalog: BranchCatalog,
    scope: Scope,
    days: int = 30,
    *,
    today: date | None = None,
    max_concurrency: int | None = None,
) -> SalesSeries:
    """Build the daily sales series; see TimeSeriesAggregator.build_series."""
    aggregator = TimeSeriesAggregator(source, catalog, max_concurrency=max_concurrency)
    return await aggregator.build_series(scope, days, today=today)
