"""Console output formatting utilities."""

from __future__ import annotations

import re

from pos_dashboard.models import (
    BranchRanking,
    LowStockRow,
    ReportTotals,
    SaleRecord,
    SalesSeries,
    StatsSummary,
    low_stock_frame,
)


def sanitize_for_console(text: str) -> str:
    """Strip non-ASCII characters so output survives cp1252 consoles."""
    return re.sub(r"[^\x00-\x7F]+", "", text)


def format_ugx(amount: float) -> str:
    """Format an amount in whole Uganda shillings.

    Examples:
        >>> format_ugx(1234567.4)
        'UGX 1,234,567'

    """
    return f"UGX {amount:,.0f}"


def format_ugx_compact(amount: float) -> str:
    """Short axis-style amount.

    Examples:
        >>> format_ugx_compact(2_460_000)
        '2.5M'
        >>> format_ugx_compact(45_300)
        '45K'
        >>> format_ugx_compact(900)
        '900'

    """
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"{amount / 1_000:.0f}K"
    return f"{amount:g}"


def format_growth(growth: float) -> str:
    sign = "+" if growth >= 0 else ""
    return f"{sign}{growth:.1f}%"


def column_labels(series: SalesSeries) -> dict[int, str]:
    """Display label per branch id; names shared by several branches get the id appended."""
    labels = series.labels()
    names = list(labels.values())
    return {
        bid: (f"{name} (#{bid})" if names.count(name) > 1 else name) for bid, name in labels.items()
    }


def format_series_for_console(series: SalesSeries) -> str:
    """Render the daily sales series as a table, one column per branch."""
    lines = [f"Sales Overview - {series.start} to {series.end}", "=" * 60]
    if not series.branches:
        lines.append("No branches in scope.")
        return "\n".join(lines)

    df = series.to_frame().rename(columns=column_labels(series))
    df["Total"] = df.sum(axis=1)
    lines.append(df.to_string(float_format=lambda v: f"{v:,.0f}"))
    lines.append("")
    total = float(df["Total"].sum())
    lines.append(f"Period total: {format_ugx(total)} ({format_ugx_compact(total)})")
    return "\n".join(lines)


def format_ranking_for_console(ranking: BranchRanking) -> str:
    """Render top and bottom performers."""
    if ranking.is_empty:
        return "Branch ranking is only available in the company-wide view."

    lines = [f"Branch Ranking by {ranking.metric}", "=" * 60]
    for title, entries in (("Top performers", ranking.top), ("Needs attention", ranking.bottom)):
        lines.append(f"{title}:")
        for pos, entry in enumerate(entries, start=1):
            lines.append(
                f"  {pos}. {entry.branch.name:<24} {format_ugx(entry.value):>18}  "
                f"{format_growth(entry.growth)}"
            )
        lines.append("")
    return "\n".join(lines).rstrip()


def format_low_stock_for_console(rows: list[LowStockRow]) -> str:
    """Render the consolidated low-stock list."""
    if not rows:
        return "No low stock items."
    critical = sum(1 for row in rows if row.is_critical)
    header = f"Low Stock Alerts - {len(rows)} item(s), {critical} critical"
    table = low_stock_frame(rows).to_string(index=False, float_format=lambda v: f"{v:g}")
    return "\n".join([header, "=" * 60, table])


def format_summary_for_console(summary: StatsSummary) -> str:
    """Render the headline cards."""
    stats = summary.stats
    label = "Total" if summary.scope.is_company_wide else "Branch"
    return "\n".join(
        [
            f"{label} Sales Today:      {format_ugx(stats.total_sales_today)}",
            f"{label} Sales This Month: {format_ugx(stats.total_sales_this_month)} "
            f"({format_growth(summary.monthly_growth)} vs monthly average)",
            f"{label} Sales This Year:  {format_ugx(stats.total_sales_this_year)}",
            f"Transactions Today:      {stats.transaction_count_today}",
            f"Net Profit This Month:   {format_ugx(stats.net_profit_this_month)}",
        ]
    )


def format_recent_sales_for_console(sales: list[SaleRecord], labels: dict[int, str] | None = None) -> str:
    """Render recent sales, newest first."""
    if not sales:
        return "No recent sales."
    labels = labels or {}
    lines = [f"Recent Sales - {len(sales)} sale(s)", "=" * 60]
    for sale in sales:
        branch = labels.get(sale.branch_id, f"Branch {sale.branch_id}")
        lines.append(
            f"  {sale.sale_date[:16]:<16}  {sale.sale_number:<14} {branch:<20} {format_ugx(sale.grand_total):>16}"
        )
    return "\n".join(lines)


def format_report_for_console(totals: ReportTotals) -> str:
    """Render per-branch report totals and the overall total."""
    title = "Sales Report" if totals.report == "sales" else "Inventory Value Report"
    lines = [f"{title} - {totals.scope}", "=" * 60]
    for entry in totals.branches:
        lines.append(f"  {entry.branch.name:<24} {format_ugx(entry.value):>18}")
    lines.append(f"  {'Total':<24} {format_ugx(totals.total):>18}")
    if totals.failed:
        names = ", ".join(branch.name for branch in totals.failed)
        lines.append(f"Not included (unavailable): {names}")
    return "\n".join(lines)
