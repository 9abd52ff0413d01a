"""Most recent sales across branches.

Merges every branch's sales into one list, newest first, capped for display.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import pandas as pd

from pos_dashboard.fanout import gather_settled
from pos_dashboard.models import SaleRecord, Scope

if TYPE_CHECKING:
    from pos_dashboard.branches import BranchCatalog
    from pos_dashboard.client import BranchDataSource

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 50


def newest_first(batches: Iterable[Sequence[SaleRecord]], limit: int = DEFAULT_RECENT_LIMIT) -> list[SaleRecord]:
    """Flatten per-branch sales and keep the ``limit`` most recent.

    Sale dates are parsed as ISO 8601 (date or local datetime). Sales with
    the same timestamp keep their input order; unparseable dates sort last.
    """
    records = [record for batch in batches for record in batch]
    if not records or limit == 0:
        return []

    df = pd.DataFrame(
        {
            "pos": range(len(records)),
            "ts": pd.to_datetime([r.sale_date for r in records], errors="coerce", format="ISO8601"),
        }
    )
    df = df.sort_values(["ts", "pos"], ascending=[False, True], na_position="last")
    return [records[i] for i in df["pos"].head(limit)]


class RecentSalesConsolidator:
    """Builds the recent-sales table for a scope."""

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

    async def recent_sales(self, scope: Scope, limit: int = DEFAULT_RECENT_LIMIT) -> list[SaleRecord]:
        """Return the most recent sales of the scope, newest first.

        Args:
            scope: A single branch, or company-wide for every active branch.
            limit: Maximum number of sales returned (>= 0).

        Returns:
            Up to ``limit`` sales. Branches whose fetch fails contribute none.

        Raises:
            ValueError: If limit is negative.

        """
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        branches = await self.catalog.resolve_branches(scope)
        outcomes = await gather_settled(
            branches,
            lambda branch: self.source.branch_sales(branch.id),
            label="recent-sales",
            limit=self.max_concurrency,
        )
        sales = newest_first((o.value for o in outcomes if o.ok), limit)
        logger.info("Recent sales for %s: %d of limit %d", scope, len(sales), limit)
        return sales


async def recent_sales(
    source: BranchDataSource,
    catalog: BranchCatalog,
    scope: Scope,
    limit: int = DEFAULT_RECENT_LIMIT,
    *,
    max_concurrency: int | None = None,
) -> list[SaleRecord]:
    """Most recent sales; see RecentSalesConsolidator.recent_sales."""
    consolidator = RecentSalesConsolidator(source, catalog, max_concurrency=max_concurrency)
    return await consolidator.recent_sales(scope, limit)
