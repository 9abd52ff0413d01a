"""Output formatting utilities."""

from pos_dashboard.formatters.console import (
    format_low_stock_for_console,
    format_ranking_for_console,
    format_recent_sales_for_console,
    format_report_for_console,
    format_series_for_console,
    format_summary_for_console,
    sanitize_for_console,
)

__all__ = [
    "format_low_stock_for_console",
    "format_ranking_for_console",
    "format_recent_sales_for_console",
    "format_report_for_console",
    "format_series_for_console",
    "format_summary_for_console",
    "sanitize_for_console",
]
