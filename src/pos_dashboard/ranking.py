"""Branch ranking by period metrics.

Ranks active branches by one summary statistic (monthly revenue by
default) and reports each branch's growth against its yearly average.
Only meaningful company-wide; a single-branch scope yields an empty ranking.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from pos_dashboard.exceptions import UnsupportedOperation
from pos_dashboard.fanout import gather_settled
from pos_dashboard.models import COMPANY_WIDE, BranchRanking, BranchStats, RankedBranch, Scope

if TYPE_CHECKING:
    from pos_dashboard.branches import BranchCatalog
    from pos_dashboard.client import BranchDataSource

logger = logging.getLogger(__name__)

DEFAULT_METRIC = "month_revenue"
DEFAULT_LIMIT = 3

METRICS: dict[str, Callable[[BranchStats], float]] = {
    "month_revenue": lambda s: s.total_sales_this_month,
    "year_revenue": lambda s: s.total_sales_this_year,
    "today_revenue": lambda s: s.total_sales_today,
    "month_transactions": lambda s: float(s.transaction_count_this_month),
    "average_transaction": lambda s: s.average_transaction_value,
    "month_net_profit": lambda s: s.net_profit_this_month,
}


def monthly_growth(month_revenue: float, year_revenue: float) -> float:
    """Growth of this month's revenue over the average month of the year, in percent.

    Assumes revenue is spread evenly over the year. Returns 0.0 when there is
    no yearly revenue to compare against.

    Examples:
        >>> monthly_growth(150.0, 1200.0)
        50.0
        >>> monthly_growth(100.0, 0.0)
        0.0

    """
    if year_revenue > 0:
        return (month_revenue / (year_revenue / 12) - 1) * 100
    return 0.0


def require_company_wide(scope: Scope, operation: str) -> None:
    """Raise UnsupportedOperation when ``operation`` is attempted in a single-branch scope."""
    if not scope.is_company_wide:
        raise UnsupportedOperation(f"{operation} is only available company-wide, not for {scope}")


def rank(
    entries: list[RankedBranch],
    metric: str = DEFAULT_METRIC,
    limit: int = DEFAULT_LIMIT,
) -> BranchRanking:
    """Order ranked entries by value and cut top and bottom lists.

    Sorting is stable, so branches with equal values keep catalog order.
    The bottom list is the last ``limit`` entries reversed: the weakest
    branch comes first.
    """
    ordered = sorted(entries, key=lambda rb: rb.value, reverse=True)
    top = ordered[:limit]
    bottom = list(reversed(ordered[-limit:])) if limit > 0 else []
    return BranchRanking(metric=metric, top=tuple(top), bottom=tuple(bottom))


class RankingAggregator:
    """Ranks branches from their individually fetched summary statistics."""

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

    async def rank_branches(
        self,
        scope: Scope = COMPANY_WIDE,
        metric: str = DEFAULT_METRIC,
        *,
        limit: int = DEFAULT_LIMIT,
    ) -> BranchRanking:
        """Rank active branches by ``metric``.

        Branches whose statistics cannot be fetched are left out of the
        ranking entirely, so an outage never shows up as a zero-revenue
        bottom performer.

        Args:
            scope: Must be company-wide; other scopes give an empty ranking.
            metric: One of METRICS.
            limit: Size of the top and bottom lists.

        Returns:
            BranchRanking with up to ``limit`` top and bottom entries.

        Raises:
            ValueError: If metric is unknown or limit is negative.

        """
        if metric not in METRICS:
            raise ValueError(f"Invalid metric '{metric}'. Must be one of: {', '.join(METRICS)}.")
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        try:
            require_company_wide(scope, "Branch ranking")
        except UnsupportedOperation as e:
            logger.debug("%s; returning an empty ranking", e)
            return BranchRanking(metric=metric)

        value_of = METRICS[metric]
        outcomes = await gather_settled(
            await self.catalog.resolve_branches(scope),
            lambda branch: self.source.branch_stats(branch.id),
            label="stats",
            limit=self.max_concurrency,
        )

        entries = [
            RankedBranch(
                branch=o.branch,
                value=value_of(o.value),
                growth=monthly_growth(o.value.total_sales_this_month, o.value.total_sales_this_year),
            )
            for o in outcomes
            if o.ok
        ]
        logger.info("Ranked %d of %d branch(es) by %s", len(entries), len(outcomes), metric)
        return rank(entries, metric, limit)


async def rank_branches(
    source: BranchDataSource,
    catalog: BranchCatalog,
    scope: Scope = COMPANY_WIDE,
    metric: str = DEFAULT_METRIC,
    *,
    limit: int = DEFAULT_LIMIT,
    max_concurrency: int | None = None,
) -> BranchRanking:
    """Rank branches; see RankingAggregator.rank_branches."""
    aggregator = RankingAggregator(source, catalog, max_concurrency=max_concurrency)
    return await aggregator.rank_branches(scope, metric, limit=limit)
