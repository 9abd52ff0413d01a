"""Tests for cross-branch low-stock consolidation."""

import asyncio

import pytest

from pos_dashboard.branches import BranchCatalog
from pos_dashboard.models import COMPANY_WIDE, LowStockRow, Scope, low_stock_frame, stock_status
from pos_dashboard.stock import LowStockConsolidator, consolidate_low_stock, merge_low_stock
from tests.test_utils import FakeDataSource, make_branches, stock


def make_catalog(source: FakeDataSource) -> BranchCatalog:
    catalog = BranchCatalog(source)
    catalog.refresh()
    return catalog


def test_failed_branch_contributes_nothing() -> None:
    """Branch 1 returns one item, branch 2 fails: exactly branch 1's item comes back."""
    item = stock(1, "X", quantity=2, reorder_level=10)
    source = FakeDataSource(branches=make_branches("One", "Two"), low={1: [item]}, failing={2})

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), COMPANY_WIDE))

    assert rows == [LowStockRow.from_record(item)]
    assert rows[0].status == "Critical"


def test_sorted_by_raw_quantity_not_percentage() -> None:
    """5 of 100 (5%) sorts after 3 of 3 (100%)."""
    source = FakeDataSource(
        branches=make_branches("One", "Two"),
        low={
            1: [stock(1, "A", 5, 100), stock(1, "B", 9, 10)],
            2: [stock(2, "C", 3, 3), stock(2, "D", 0, 4)],
        },
    )

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), COMPANY_WIDE))

    assert [r.sku for r in rows] == ["D", "C", "A", "B"]
    assert [r.quantity for r in rows] == sorted(r.quantity for r in rows)


def test_equal_quantities_keep_catalog_order() -> None:
    source = FakeDataSource(
        branches=make_branches("One", "Two"),
        low={2: [stock(2, "B", 1, 5)], 1: [stock(1, "A", 1, 5)]},
    )

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), COMPANY_WIDE))

    assert [r.branch_id for r in rows] == [1, 2]


def test_cap_limits_rows() -> None:
    low = {1: [stock(1, f"S{i}", i, 50, product_id=i) for i in range(30)]}
    source = FakeDataSource(branches=make_branches("One"), low=low)

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), COMPANY_WIDE, cap=20))

    assert len(rows) == 20
    assert rows[-1].sku == "S19"


def test_cap_zero_gives_empty_list() -> None:
    source = FakeDataSource(branches=make_branches("One"), low={1: [stock(1, "A", 1, 5)]})

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), COMPANY_WIDE, cap=0))

    assert rows == []


def test_negative_cap_raises() -> None:
    source = FakeDataSource(branches=make_branches("One"))
    consolidator = LowStockConsolidator(source, make_catalog(source))

    with pytest.raises(ValueError, match="cap"):
        asyncio.run(consolidator.consolidate_low_stock(COMPANY_WIDE, cap=-1))


def test_single_branch_fetches_only_that_branch() -> None:
    source = FakeDataSource(
        branches=make_branches("One", "Two"),
        low={1: [stock(1, "A", 1, 5)], 2: [stock(2, "B", 0, 5)]},
    )

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), Scope.single(1)))

    assert [r.sku for r in rows] == ["A"]
    assert [c for c in source.calls if c[0] == "low-stock"] == [("low-stock", 1)]


def test_single_branch_failure_gives_empty_list() -> None:
    source = FakeDataSource(branches=make_branches("One"), failing={1})

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), Scope.single(1)))

    assert rows == []


def test_no_branches() -> None:
    source = FakeDataSource()

    rows = asyncio.run(consolidate_low_stock(source, make_catalog(source), COMPANY_WIDE))

    assert rows == []


def test_merge_low_stock_flattens_batches() -> None:
    rows = merge_low_stock([[stock(1, "A", 4, 5)], [], [stock(3, "C", 2, 5)]], cap=5)

    assert [r.sku for r in rows] == ["C", "A"]


@pytest.mark.parametrize(
    ("quantity", "reorder", "expected"),
    [
        (0, 10, "Critical"),
        (2.5, 10, "Critical"),
        (3, 10, "Low"),
        (5, 10, "Low"),
        (8, 10, "Warning"),
        (10, 10, "Warning"),
        (11, 10, "OK"),
        (0, 0, "Warning"),
    ],
)
def test_stock_status(quantity: float, reorder: float, expected: str) -> None:
    assert stock_status(quantity, reorder) == expected


def test_row_identity_and_frame() -> None:
    row = LowStockRow.from_record(stock(3, "SKU-9", 1, 8, product_id=42))

    assert row.row_id == "3-42"
    assert row.level_pct == pytest.approx(12.5)
    df = low_stock_frame([row])
    assert list(df.columns) == ["branch", "sku", "product", "quantity", "reorder_level", "status"]
    assert df.iloc[0]["status"] == "Critical"
