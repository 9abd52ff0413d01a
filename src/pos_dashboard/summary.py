"""Headline summary figures for the selected scope."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pos_dashboard.models import StatsSummary
from pos_dashboard.ranking import monthly_growth

if TYPE_CHECKING:
    from pos_dashboard.client import BranchDataSource
    from pos_dashboard.models import Scope

logger = logging.getLogger(__name__)


async def summarize(source: BranchDataSource, scope: Scope) -> StatsSummary | None:
    """Fetch summary statistics for the scope and derive monthly growth.

    Company-wide statistics come from one unfiltered call, not from summing
    branches. Returns None (after logging) when the statistics cannot be
    fetched; the caller decides how to show that.
    """
    try:
        stats = await asyncio.to_thread(source.branch_stats, scope.branch_id)
    except Exception as e:
        logger.error("Failed to fetch dashboard stats for %s: %s", scope, e)
        return None
    growth = monthly_growth(stats.total_sales_this_month, stats.total_sales_this_year)
    return StatsSummary(scope=scope, stats=stats, monthly_growth=growth)
