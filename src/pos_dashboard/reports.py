"""Company-wide report totals.

Two reports are consolidated across branches:

- **sales**: revenue (sum of grand totals) over an inclusive date range
- **inventory**: value of stock on hand at cost price

Each branch is fetched independently; a branch that fails is listed in
``ReportTotals.failed`` and adds nothing to the total.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING, Any

from pos_dashboard.fanout import gather_settled
from pos_dashboard.models import BranchTotal, ReportTotals, Scope, stock_value

if TYPE_CHECKING:
    from pos_dashboard.branches import BranchCatalog
    from pos_dashboard.client import BranchDataSource
    from pos_dashboard.models import Branch

logger = logging.getLogger(__name__)


class ReportAggregator:
    """Totals per branch and for the whole scope.

    Example:
        >>> reports = ReportAggregator(client, catalog)
        >>> totals = asyncio.run(reports.inventory_report(Scope.company_wide()))
        >>> totals.total
        48250000.0

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

    async def _totals(
        self,
        report: str,
        scope: Scope,
        fetch: Callable[[Branch], Any],
        value_of: Callable[[Any], float],
    ) -> ReportTotals:
        branches = await self.catalog.resolve_branches(scope)
        outcomes = await gather_settled(branches, fetch, label=report, limit=self.max_concurrency)
        totals = ReportTotals(
            report=report,
            scope=scope,
            branches=tuple(BranchTotal(o.branch, value_of(o.value)) for o in outcomes if o.ok),
            failed=tuple(o.branch for o in outcomes if not o.ok),
        )
        logger.info(
            "%s report for %s: %.2f from %d branch(es), %d failed",
            report,
            scope,
            totals.total,
            len(totals.branches),
            len(totals.failed),
        )
        return totals

    async def sales_report(self, scope: Scope, start: date, end: date) -> ReportTotals:
        """Revenue per branch between two calendar dates (inclusive).

        Raises:
            ValueError: If start is after end.

        """
        if start > end:
            raise ValueError(f"start ({start}) must not be after end ({end})")
        return await self._totals(
            "sales",
            scope,
            lambda branch: self.source.sales_in_range(branch.id, start, end),
            lambda sales: sum(sale.grand_total for sale in sales),
        )

    async def inventory_report(self, scope: Scope) -> ReportTotals:
        """Stock value (quantity times cost price) per branch."""
        return await self._totals(
            "inventory",
            scope,
            lambda branch: self.source.branch_stock(branch.id),
            stock_value,
        )
