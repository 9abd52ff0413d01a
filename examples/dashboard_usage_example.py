"""Simple example: consolidated dashboard views for all branches and one branch.

This demonstrates the key usage patterns of DashboardService and the
individual aggregators. Requires POS_API_BASE (and POS_API_TOKEN when the
API enforces authentication).
"""

import asyncio

from pos_dashboard import DashboardConfig, DashboardService, Scope
from pos_dashboard.formatters import (
    format_low_stock_for_console,
    format_ranking_for_console,
    format_report_for_console,
)

# Setup
service = DashboardService.from_config(DashboardConfig.from_env())
branches = asyncio.run(service.start())
print(f"Active branches: {[b.name for b in branches]}\n")

# Example 1: Company-wide snapshot (all four views at once)
print("Example 1: Company-wide snapshot")
print("-" * 60)
snapshot = asyncio.run(service.refresh(Scope.company_wide(), days=7))
if snapshot.error:
    print(f"Error: {snapshot.error}")
df = snapshot.series.to_frame().rename(columns=snapshot.series.labels())
print(df)
print()
print(format_ranking_for_console(snapshot.ranking))
print()

# Example 2: Single branch (ranking is empty outside the company-wide view)
if branches:
    first = branches[0]
    print(f"Example 2: Single branch ({first.name})")
    print("-" * 60)
    snapshot = asyncio.run(service.refresh(Scope.single(first.id), days=7))
    print(f"Ranking empty: {snapshot.ranking.is_empty}")
    print(format_low_stock_for_console(snapshot.low_stock))
    print()

# Example 3: Using an aggregator directly with a larger cap
print("Example 3: Low stock across branches, up to 50 rows")
print("-" * 60)
rows = asyncio.run(service.low_stock_consolidator.consolidate_low_stock(Scope.company_wide(), cap=50))
print(f"Rows: {len(rows)}, critical: {sum(1 for row in rows if row.is_critical)}")
print()

# Example 4: Inventory value per branch (unavailable branches are listed, not counted)
print("Example 4: Inventory value report")
print("-" * 60)
totals = asyncio.run(service.reports.inventory_report(Scope.company_wide()))
print(format_report_for_console(totals))

service.close()
