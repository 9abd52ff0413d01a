"""Cross-branch low-stock consolidation.

Merges per-branch low-stock lists into one flat list ordered by raw
quantity (lowest first) and capped for display.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pos_dashboard.fanout import gather_settled
from pos_dashboard.models import LowStockRow, Scope, StockLevelRecord

if TYPE_CHECKING:
    from pos_dashboard.branches import BranchCatalog
    from pos_dashboard.client import BranchDataSource

logger = logging.getLogger(__name__)

DEFAULT_CAP = 20


def merge_low_stock(batches: Iterable[Iterable[StockLevelRecord]], cap: int = DEFAULT_CAP) -> list[LowStockRow]:
    """Flatten per-branch record lists, sort by quantity ascending and keep the first ``cap``.

    The sort key is the raw quantity only. Ties keep their input order, so
    earlier branches in the catalog come first.
    """
    rows = [LowStockRow.from_record(record) for batch in batches for record in batch]
    rows.sort(key=lambda row: row.quantity)
    return rows[:cap]


class LowStockConsolidator:
    """Builds the capped low-stock list for a scope."""

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

    async def consolidate_low_stock(self, scope: Scope, cap: int = DEFAULT_CAP) -> list[LowStockRow]:
        """Return the lowest-quantity stock items for the scope.

        Args:
            scope: A single branch, or company-wide for every active branch.
            cap: Maximum number of rows returned (>= 0).

        Returns:
            Up to ``cap`` rows, lowest quantity first. Branches whose fetch
            fails contribute no rows.

        Raises:
            ValueError: If cap is negative.

        """
        if cap < 0:
            raise ValueError(f"cap must be >= 0, got {cap}")

        branches = await self.catalog.resolve_branches(scope)
        outcomes = await gather_settled(
            branches,
            lambda branch: self.source.low_stock(branch.id),
            label="low-stock",
            limit=self.max_concurrency,
        )
        rows = merge_low_stock((o.value for o in outcomes if o.ok), cap)
        logger.info(
            "Low stock for %s: %d row(s) from %d of %d branch(es)",
            scope,
            len(rows),
            sum(1 for o in outcomes if o.ok),
            len(outcomes),
        )
        return rows


async def consolidate_low_stock(
    source: BranchDataSource,
    catalog: BranchCatalog,
    scope: Scope,
    cap: int = DEFAULT_CAP,
    *,
    max_concurrency: int | None = None,
) -> list[LowStockRow]:
    """Consolidate low stock; see LowStockConsolidator.consolidate_low_stock."""
    consolidator = LowStockConsolidator(source, catalog, max_concurrency=max_concurrency)
    return await consolidator.consolidate_low_stock(scope, cap)
