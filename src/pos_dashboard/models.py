"""View-model types shared by the catalog, the aggregators and presentation.

Every type here is a frozen dataclass: a snapshot produced by one
aggregation call and never mutated afterwards. Records coming from the
REST API are built with the ``from_api`` constructors, which map the API's
camelCase JSON onto snake_case attributes and treat missing numbers as 0.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any

import pandas as pd

# Stock level status thresholds, as a percentage of the reorder level
CRITICAL_PCT = 25.0
LOW_PCT = 50.0
WARNING_PCT = 100.0


def _as_float(value: Any) -> float:
    """Parse an API number (int, float, decimal string or null) as a finite float."""
    if value is None or value == "":
        return 0.0
    result = float(value)
    if not math.isfinite(result):
        return 0.0
    return result


def _as_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(value)


@dataclass(frozen=True)
class Branch:
    """A store location.

    Attributes:
        id: Stable unique identifier.
        name: Display name (not guaranteed unique).
        code: Short branch code.
        is_active: Inactive branches are excluded from aggregation inputs.
        address: Optional street address.
        phone: Optional phone number.

    """

    id: int
    name: str
    code: str = ""
    is_active: bool = True
    address: str | None = None
    phone: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Branch:
        return cls(
            id=int(payload["id"]),
            name=str(payload.get("name") or ""),
            code=str(payload.get("code") or ""),
            is_active=bool(payload.get("isActive", True)),
            address=payload.get("address"),
            phone=payload.get("phone"),
        )

    @classmethod
    def placeholder(cls, branch_id: int) -> Branch:
        """Minimal stand-in used when a selected branch is missing from the catalog."""
        return cls(id=branch_id, name="Branch", code="", is_active=True)


@dataclass(frozen=True)
class Scope:
    """Branch filter for a query: one branch, or company-wide when branch_id is None."""

    branch_id: int | None = None

    @classmethod
    def company_wide(cls) -> Scope:
        return cls(None)

    @classmethod
    def single(cls, branch_id: int) -> Scope:
        return cls(int(branch_id))

    @property
    def is_company_wide(self) -> bool:
        return self.branch_id is None

    def __str__(self) -> str:
        if self.branch_id is None:
            return "company-wide"
        return f"branch {self.branch_id}"


COMPANY_WIDE = Scope.company_wide()


@dataclass(frozen=True)
class SaleRecord:
    """One completed sale, as much of it as the aggregators need.

    ``sale_date`` is kept as the API sends it (an ISO date or local datetime
    string); day bucketing matches on its ``YYYY-MM-DD`` prefix.
    """

    id: int
    branch_id: int
    sale_date: str
    grand_total: float
    sale_number: str = ""
    payment_method: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> SaleRecord:
        return cls(
            id=_as_int(payload.get("id")),
            branch_id=_as_int(payload.get("branchId")),
            sale_date=str(payload.get("saleDate") or ""),
            grand_total=_as_float(payload.get("grandTotal")),
            sale_number=str(payload.get("saleNumber") or ""),
            payment_method=str(payload.get("paymentMethod") or ""),
        )


@dataclass(frozen=True)
class StockLevelRecord:
    """Current stock of one product at one branch."""

    branch_id: int
    product_id: int
    quantity: float
    reorder_level: float
    branch_name: str = ""
    product_name: str = ""
    sku: str = ""
    cost_price: float = 0.0
    selling_price: float = 0.0
    category_name: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> StockLevelRecord:
        return cls(
            branch_id=_as_int(payload.get("branchId")),
            product_id=_as_int(payload.get("productId")),
            quantity=_as_float(payload.get("quantity")),
            reorder_level=_as_float(payload.get("reorderLevel")),
            branch_name=str(payload.get("branchName") or ""),
            product_name=str(payload.get("productName") or ""),
            sku=str(payload.get("productSku") or ""),
            cost_price=_as_float(payload.get("costPrice")),
            selling_price=_as_float(payload.get("sellingPrice")),
            category_name=payload.get("categoryName"),
        )

    @property
    def is_low(self) -> bool:
        return self.quantity <= self.reorder_level


@dataclass(frozen=True)
class BranchStats:
    """Period summary statistics for one branch (or the whole company)."""

    total_sales_today: float = 0.0
    total_sales_this_month: float = 0.0
    total_sales_this_year: float = 0.0
    transaction_count_today: int = 0
    transaction_count_this_month: int = 0
    average_transaction_value: float = 0.0
    total_expenses_this_month: float = 0.0
    net_profit_this_month: float = 0.0
    sales_by_payment_method: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "sales_by_payment_method", MappingProxyType(dict(self.sales_by_payment_method))
        )

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> BranchStats:
        by_method = payload.get("salesByPaymentMethod") or {}
        return cls(
            total_sales_today=_as_float(payload.get("totalSalesToday")),
            total_sales_this_month=_as_float(payload.get("totalSalesThisMonth")),
            total_sales_this_year=_as_float(payload.get("totalSalesThisYear")),
            transaction_count_today=_as_int(payload.get("transactionCountToday")),
            transaction_count_this_month=_as_int(payload.get("transactionCountThisMonth")),
            average_transaction_value=_as_float(payload.get("averageTransactionValue")),
            total_expenses_this_month=_as_float(payload.get("totalExpensesThisMonth")),
            net_profit_this_month=_as_float(payload.get("netProfitThisMonth")),
            sales_by_payment_method={str(k): _as_float(v) for k, v in by_method.items()},
        )


@dataclass(frozen=True)
class ChartRow:
    """One calendar day of the sales chart.

    Attributes:
        day: The calendar day (viewer's local calendar).
        totals: Read-only mapping of branch id to that day's sales total.
            Every branch in scope is present; days without sales are 0.0.

    """

    day: date
    totals: Mapping[int, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "totals", MappingProxyType(dict(self.totals)))

    def total_for(self, branch_id: int) -> float:
        return self.totals.get(branch_id, 0.0)

    @property
    def grand_total(self) -> float:
        return sum(self.totals.values())


@dataclass(frozen=True)
class SeriesBranch:
    """A branch column of the sales chart with its display color."""

    branch: Branch
    color: str


@dataclass(frozen=True)
class SalesSeries:
    """Dense daily sales series, one column per branch in scope."""

    start: date
    end: date
    rows: tuple[ChartRow, ...]
    branches: tuple[SeriesBranch, ...]

    def labels(self) -> dict[int, str]:
        """Map branch id to display name."""
        return {sb.branch.id: sb.branch.name for sb in self.branches}

    def colors(self) -> dict[int, str]:
        """Map branch id to chart color."""
        return {sb.branch.id: sb.color for sb in self.branches}

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a DataFrame indexed by day with one column per branch id."""
        branch_ids = [sb.branch.id for sb in self.branches]
        index = pd.Index([row.day for row in self.rows], name="date")
        data = {bid: [row.total_for(bid) for row in self.rows] for bid in branch_ids}
        return pd.DataFrame(data, index=index, columns=branch_ids, dtype=float)


@dataclass(frozen=True)
class RankedBranch:
    """A branch's metric value for the period and its growth against a yearly baseline."""

    branch: Branch
    value: float
    growth: float


@dataclass(frozen=True)
class BranchRanking:
    """Top and bottom performers for one metric."""

    metric: str
    top: tuple[RankedBranch, ...] = ()
    bottom: tuple[RankedBranch, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.top and not self.bottom

    def to_frame(self) -> pd.DataFrame:
        records = [
            {
                "group": group,
                "position": pos,
                "branch_id": rb.branch.id,
                "branch": rb.branch.name,
                "value": rb.value,
                "growth": rb.growth,
            }
            for group, entries in (("top", self.top), ("bottom", self.bottom))
            for pos, rb in enumerate(entries, start=1)
        ]
        return pd.DataFrame(
            records, columns=["group", "position", "branch_id", "branch", "value", "growth"]
        )


def stock_level_pct(quantity: float, reorder_level: float) -> float:
    """Quantity as a percentage of the reorder level (100 when there is no reorder level)."""
    if reorder_level > 0:
        return quantity / reorder_level * 100
    return 100.0


def stock_status(quantity: float, reorder_level: float) -> str:
    """Classify a stock level as Critical, Low, Warning or OK.

    Examples:
        >>> stock_status(2, 10)
        'Critical'
        >>> stock_status(5, 10)
        'Low'
        >>> stock_status(0, 0)
        'Warning'

    """
    pct = stock_level_pct(quantity, reorder_level)
    if pct <= CRITICAL_PCT:
        return "Critical"
    if pct <= LOW_PCT:
        return "Low"
    if pct <= WARNING_PCT:
        return "Warning"
    return "OK"


@dataclass(frozen=True)
class LowStockRow:
    """One entry of the consolidated low-stock list."""

    branch_id: int
    product_id: int
    sku: str
    quantity: float
    reorder_level: float
    branch_name: str = ""
    product_name: str = ""
    cost_price: float = 0.0
    selling_price: float = 0.0

    @classmethod
    def from_record(cls, record: StockLevelRecord) -> LowStockRow:
        return cls(
            branch_id=record.branch_id,
            product_id=record.product_id,
            sku=record.sku,
            quantity=record.quantity,
            reorder_level=record.reorder_level,
            branch_name=record.branch_name,
            product_name=record.product_name,
            cost_price=record.cost_price,
            selling_price=record.selling_price,
        )

    @property
    def row_id(self) -> str:
        return f"{self.branch_id}-{self.product_id}"

    @property
    def level_pct(self) -> float:
        return stock_level_pct(self.quantity, self.reorder_level)

    @property
    def status(self) -> str:
        return stock_status(self.quantity, self.reorder_level)

    @property
    def is_critical(self) -> bool:
        return self.status == "Critical"


def low_stock_frame(rows: list[LowStockRow]) -> pd.DataFrame:
    """Tabulate low-stock rows, keeping their order."""
    columns = ["branch", "sku", "product", "quantity", "reorder_level", "status"]
    return pd.DataFrame(
        [
            {
                "branch": row.branch_name,
                "sku": row.sku,
                "product": row.product_name,
                "quantity": row.quantity,
                "reorder_level": row.reorder_level,
                "status": row.status,
            }
            for row in rows
        ],
        columns=columns,
    )


@dataclass(frozen=True)
class StatsSummary:
    """Headline figures for the selected scope."""

    scope: Scope
    stats: BranchStats
    monthly_growth: float


@dataclass(frozen=True)
class BranchTotal:
    """One branch's contribution to a report total."""

    branch: Branch
    value: float


@dataclass(frozen=True)
class ReportTotals:
    """Per-branch and overall totals for one report.

    Attributes:
        report: Report name ("sales" or "inventory").
        scope: Scope the report covers.
        branches: Totals of every branch that answered, in catalog order.
        failed: Branches whose data could not be fetched. They add nothing
            to ``total``.

    """

    report: str
    scope: Scope
    branches: tuple[BranchTotal, ...] = ()
    failed: tuple[Branch, ...] = ()

    @property
    def total(self) -> float:
        return float(sum(bt.value for bt in self.branches))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [{"branch_id": bt.branch.id, "branch": bt.branch.name, "value": bt.value} for bt in self.branches],
            columns=["branch_id", "branch", "value"],
        )


def stock_value(records: list[StockLevelRecord]) -> float:
    """Value of stock on hand at cost price.

    Examples:
        >>> stock_value([StockLevelRecord(1, 1, quantity=4, reorder_level=0, cost_price=2.5)])
        10.0

    """
    return float(sum(record.quantity * record.cost_price for record in records))
