"""POS Dashboard - multi-branch metrics consolidation.

This package turns independent, per-branch POS API responses into one
company-wide view, tolerating the failure of any single branch:

- **Sales series**: one row per calendar day, one column per branch
- **Branch ranking**: top/bottom performers with monthly growth
- **Low stock**: lowest-quantity items across branches, capped
- **Summary**: headline figures for the selected scope
- **Recent sales**: newest sales across branches, capped
- **Reports**: revenue and stock value totals per branch

Module Structure:
    pos_dashboard.branches: BranchCatalog (active branches + persisted scope)
    pos_dashboard.client: PosApiClient (requests-based REST client)
    pos_dashboard.sales: Daily sales series and recent sales
    pos_dashboard.ranking: Branch ranking
    pos_dashboard.stock: Low-stock consolidation
    pos_dashboard.reports: Sales and inventory report totals
    pos_dashboard.dashboard: DashboardService facade

Quick Start:
    >>> import asyncio
    >>> from pos_dashboard import DashboardConfig, DashboardService, Scope
    >>>
    >>> service = DashboardService.from_config(DashboardConfig.from_env())
    >>> asyncio.run(service.start())
    >>> snapshot = asyncio.run(service.refresh(Scope.company_wide(), days=30))
    >>> snapshot.series.to_frame().tail()
    >>> [r.branch.name for r in snapshot.ranking.top]
"""

__version__ = "0.1.0"

from pos_dashboard.branches import BranchCatalog
from pos_dashboard.config import DashboardConfig
from pos_dashboard.dashboard import DashboardService, DashboardSnapshot
from pos_dashboard.exceptions import (
    ApiError,
    CatalogUnavailable,
    ConfigError,
    PerBranchFetchFailed,
    PosAPIError,
    UnsupportedOperation,
)
from pos_dashboard.models import COMPANY_WIDE, Branch, Scope

__all__ = [
    "ApiError",
    "Branch",
    "BranchCatalog",
    "COMPANY_WIDE",
    "CatalogUnavailable",
    "ConfigError",
    "DashboardConfig",
    "DashboardService",
    "DashboardSnapshot",
    "PerBranchFetchFailed",
    "PosAPIError",
    "Scope",
    "UnsupportedOperation",
    "__version__",
]
