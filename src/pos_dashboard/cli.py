"""Command-line access to the consolidated dashboard views.

Examples:
  # List active branches and show the persisted scope
  pos-dashboard branches

  # Select a branch (persisted), or go back to the company-wide view
  pos-dashboard scope 3
  pos-dashboard scope all

  # Daily sales per branch for the last 7 days
  pos-dashboard series --days 7

  # Top/bottom branches by monthly revenue
  pos-dashboard ranking --metric month_revenue

  # Lowest stock across all branches
  pos-dashboard low-stock --cap 20 --branch all

  # Latest 50 sales across branches
  pos-dashboard recent-sales --limit 50

  # Revenue and stock value per branch (sales defaults to month to date)
  pos-dashboard report sales --start 2025-01-01 --end 2025-01-31
  pos-dashboard report inventory

Environment:
  POS_API_BASE, POS_API_TOKEN, POS_API_TIMEOUT, POS_API_RETRIES,
  POS_STATE_DIR, POS_MAX_CONCURRENCY (see pos_dashboard.config)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pos_dashboard.config import DashboardConfig
from pos_dashboard.dashboard import STATS_ERROR_MESSAGE, DashboardService
from pos_dashboard.exceptions import ConfigError
from pos_dashboard.formatters.console import (
    format_low_stock_for_console,
    format_ranking_for_console,
    format_recent_sales_for_console,
    format_report_for_console,
    format_series_for_console,
    format_summary_for_console,
    sanitize_for_console,
)
from pos_dashboard.models import COMPANY_WIDE, Scope
from pos_dashboard.ranking import METRICS
from pos_dashboard.summary import summarize
from pos_dashboard.utils import local_today, parse_date


def parse_scope(value: str) -> Scope:
    """Parse "all" or a branch id into a Scope."""
    if value.lower() in ("all", "company"):
        return COMPANY_WIDE
    try:
        return Scope.single(int(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected a branch id or 'all', got {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pos-dashboard", description="Multi-branch POS dashboard")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("branches", help="List active branches")

    scope = sub.add_parser("scope", help="Select and persist the branch scope")
    scope.add_argument("scope", type=parse_scope, help="Branch id, or 'all' for company-wide")

    series = sub.add_parser("series", help="Daily sales per branch")
    series.add_argument("--days", type=int, default=None)
    series.add_argument("--branch", type=parse_scope, default=None)

    ranking = sub.add_parser("ranking", help="Top and bottom branches")
    ranking.add_argument("--metric", choices=sorted(METRICS), default="month_revenue")
    ranking.add_argument("--limit", type=int, default=3)

    low = sub.add_parser("low-stock", help="Lowest stock items")
    low.add_argument("--cap", type=int, default=None)
    low.add_argument("--branch", type=parse_scope, default=None)

    summary = sub.add_parser("summary", help="Headline figures")
    summary.add_argument("--branch", type=parse_scope, default=None)

    recent = sub.add_parser("recent-sales", help="Most recent sales, newest first")
    recent.add_argument("--limit", type=int, default=50)
    recent.add_argument("--branch", type=parse_scope, default=None)

    report = sub.add_parser("report", help="Revenue or stock value totals per branch")
    report.add_argument("report", choices=["sales", "inventory"])
    report.add_argument("--start", type=parse_date, default=None, help="YYYY-MM-DD (default: first of this month)")
    report.add_argument("--end", type=parse_date, default=None, help="YYYY-MM-DD (default: today)")
    report.add_argument("--branch", type=parse_scope, default=None)
    return p


async def run_command(service: DashboardService, args: argparse.Namespace) -> int:
    """Execute one subcommand against a started-up service and print its output."""
    branches = await service.start()
    if service.catalog.error:
        print(f"Error: {service.catalog.error}", file=sys.stderr)
        if args.command in ("branches", "scope"):
            return 1

    if args.command == "branches":
        current = service.catalog.get_scope()
        for branch in branches:
            marker = "*" if current.branch_id == branch.id else " "
            print(f"{marker} {branch.id:>4}  {branch.code:<8} {branch.name}")
        print(f"Scope: {current}")
        return 0

    if args.command == "scope":
        if not args.scope.is_company_wide and service.catalog.find(args.scope.branch_id) is None:
            print(f"Error: branch {args.scope.branch_id} is not an active branch", file=sys.stderr)
            return 1
        service.select_scope(args.scope)
        print(f"Scope: {args.scope}")
        return 0

    scope = getattr(args, "branch", None) or service.catalog.get_scope()

    if args.command == "series":
        days = args.days if args.days is not None else service.default_days
        series = await service.series_aggregator.build_series(scope, days)
        text = format_series_for_console(series)
    elif args.command == "ranking":
        ranking = await service.ranking_aggregator.rank_branches(COMPANY_WIDE, args.metric, limit=args.limit)
        text = format_ranking_for_console(ranking)
    elif args.command == "low-stock":
        cap = args.cap if args.cap is not None else service.low_stock_cap
        rows = await service.low_stock_consolidator.consolidate_low_stock(scope, cap)
        text = format_low_stock_for_console(rows)
    elif args.command == "recent-sales":
        sales = await service.recent_sales_consolidator.recent_sales(scope, args.limit)
        text = format_recent_sales_for_console(sales, {b.id: b.name for b in service.catalog.branches})
    elif args.command == "report":
        if args.report == "inventory":
            totals = await service.reports.inventory_report(scope)
        else:
            end = args.end or local_today()
            start = args.start or end.replace(day=1)
            totals = await service.reports.sales_report(scope, start, end)
        text = format_report_for_console(totals)
    else:
        summary = await summarize(service.source, scope)
        if summary is None:
            print(f"Error: {STATS_ERROR_MESSAGE}", file=sys.stderr)
            return 1
        text = format_summary_for_console(summary)

    print(sanitize_for_console(text))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``pos-dashboard`` console script."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = DashboardConfig.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    service = DashboardService.from_config(config)
    try:
        return asyncio.run(run_command(service, args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        service.close()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
