"""Stock domain module: consolidated low-stock alerts across branches."""

from pos_dashboard.stock.low_stock import LowStockConsolidator, consolidate_low_stock, merge_low_stock

__all__ = ["LowStockConsolidator", "consolidate_low_stock", "merge_low_stock"]
