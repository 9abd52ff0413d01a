"""Dashboard facade: one refresh call for every consolidated view.

The service owns the branch catalog and the aggregators, and publishes
each view's result through a LatestOnly slot. When the scope or date range
changes while an earlier refresh is still in flight, the earlier result is
discarded on arrival instead of overwriting the newer one.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from pos_dashboard.branches import BranchCatalog
from pos_dashboard.models import BranchRanking, LowStockRow, SalesSeries, Scope, StatsSummary
from pos_dashboard.ranking import DEFAULT_METRIC, METRICS, RankingAggregator
from pos_dashboard.reports import ReportAggregator
from pos_dashboard.sales.recent import RecentSalesConsolidator
from pos_dashboard.sales.series import TimeSeriesAggregator
from pos_dashboard.stock.low_stock import DEFAULT_CAP, LowStockConsolidator
from pos_dashboard.summary import summarize
from pos_dashboard.utils import format_duration

if TYPE_CHECKING:
    from pos_dashboard.client import BranchDataSource
    from pos_dashboard.config import DashboardConfig
    from pos_dashboard.models import Branch

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DAYS = 30
STATS_ERROR_MESSAGE = "Failed to load statistics"


class LatestOnly(Generic[T]):
    """Holds the result of the most recently issued request only.

    Every call to run() takes a ticket. A result is published only if its
    ticket is still the newest one when it arrives, so a slow earlier
    request can never overwrite the output of a later one.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.value: T | None = None
        self.published = False
        self._ticket = 0

    async def run(self, awaitable: Awaitable[T]) -> bool:
        """Await a request and publish its result unless it was superseded.

        Returns:
            True if the result was published, False if it was stale.

        """
        self._ticket += 1
        ticket = self._ticket
        result = await awaitable
        if ticket != self._ticket:
            logger.debug("Discarding stale %s result (request %d, latest %d)", self.name, ticket, self._ticket)
            return False
        self.value = result
        self.published = True
        return True


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the dashboard currently shows."""

    scope: Scope
    series: SalesSeries | None = None
    ranking: BranchRanking | None = None
    low_stock: list[LowStockRow] = field(default_factory=list)
    summary: StatsSummary | None = None
    error: str | None = None


class DashboardService:
    """Company dashboard over independently fetched branch data.

    Example:
        >>> service = DashboardService.from_config(DashboardConfig.from_env())
        >>> asyncio.run(service.start())
        >>> snapshot = asyncio.run(service.refresh(days=7))
        >>> snapshot.series.to_frame()

    """

    def __init__(
        self,
        source: BranchDataSource,
        catalog: BranchCatalog | None = None,
        config: DashboardConfig | None = None,
    ) -> None:
        self.source = source
        self.catalog = catalog if catalog is not None else BranchCatalog(source)
        self.default_days = config.default_days if config else DEFAULT_DAYS
        self.low_stock_cap = config.low_stock_cap if config else DEFAULT_CAP
        limit = config.max_concurrency if config else None

        self.series_aggregator = TimeSeriesAggregator(source, self.catalog, max_concurrency=limit)
        self.ranking_aggregator = RankingAggregator(source, self.catalog, max_concurrency=limit)
        self.low_stock_consolidator = LowStockConsolidator(source, self.catalog, max_concurrency=limit)
        self.recent_sales_consolidator = RecentSalesConsolidator(source, self.catalog, max_concurrency=limit)
        self.reports = ReportAggregator(source, self.catalog, max_concurrency=limit)

        self.series: LatestOnly[SalesSeries] = LatestOnly("series")
        self.ranking: LatestOnly[BranchRanking] = LatestOnly("ranking")
        self.low_stock: LatestOnly[list[LowStockRow]] = LatestOnly("low-stock")
        self.summary: LatestOnly[StatsSummary | None] = LatestOnly("summary")
        self._shown_scope: Scope = self.catalog.get_scope()

    @classmethod
    def from_config(cls, config: DashboardConfig) -> DashboardService:
        """Wire the HTTP client and the JSON scope store from a config."""
        from pos_dashboard.client import PosApiClient
        from pos_dashboard.scope_store import JsonFileScopeStore

        client = PosApiClient(config)
        catalog = BranchCatalog(client, JsonFileScopeStore(config.scope_file))
        return cls(client, catalog, config)

    async def start(self) -> list[Branch]:
        """Load the branch catalog and restore the persisted scope."""
        branches = await asyncio.to_thread(self.catalog.refresh)
        self._shown_scope = self.catalog.get_scope()
        return branches

    def select_scope(self, scope: Scope) -> None:
        self.catalog.set_scope(scope)

    def close(self) -> None:
        """Release the data source (the HTTP session for PosApiClient)."""
        self.source.close()

    async def refresh(
        self,
        scope: Scope | None = None,
        days: int | None = None,
        metric: str = DEFAULT_METRIC,
    ) -> DashboardSnapshot:
        """Recompute every view for a scope and date range.

        Args:
            scope: Scope to show; defaults to the catalog's current scope.
            days: Chart length; defaults to the configured number of days.
            metric: Ranking metric.

        Returns:
            The snapshot visible after this refresh settles. If a newer
            refresh was issued meanwhile, its results are the ones shown.

        Raises:
            ValueError: If days is smaller than 1 or metric is unknown.
                Nothing is fetched or published in that case.

        """
        scope = scope if scope is not None else self.catalog.get_scope()
        days = days if days is not None else self.default_days
        # Reject bad arguments before any view starts
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        if metric not in METRICS:
            raise ValueError(f"Invalid metric '{metric}'. Must be one of: {', '.join(METRICS)}.")
        started = time.monotonic()

        published = await asyncio.gather(
            self.series.run(self.series_aggregator.build_series(scope, days)),
            self.ranking.run(self.ranking_aggregator.rank_branches(scope, metric)),
            self.low_stock.run(self.low_stock_consolidator.consolidate_low_stock(scope, self.low_stock_cap)),
            self.summary.run(summarize(self.source, scope)),
        )
        if all(published):
            self._shown_scope = scope
        logger.info(
            "Dashboard refresh for %s finished in %s%s",
            scope,
            format_duration(time.monotonic() - started),
            "" if all(published) else " (superseded)",
        )
        return self.snapshot()

    def snapshot(self) -> DashboardSnapshot:
        error = self.catalog.error
        if error is None and self.summary.published and self.summary.value is None:
            error = STATS_ERROR_MESSAGE
        return DashboardSnapshot(
            scope=self._shown_scope,
            series=self.series.value,
            ranking=self.ranking.value,
            low_stock=list(self.low_stock.value or []),
            summary=self.summary.value,
            error=error,
        )
