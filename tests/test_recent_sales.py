"""Tests for the merged recent-sales table."""

import asyncio

import pytest

from pos_dashboard.branches import BranchCatalog
from pos_dashboard.models import COMPANY_WIDE, Scope
from pos_dashboard.sales import RecentSalesConsolidator, recent_sales
from pos_dashboard.sales.recent import DEFAULT_RECENT_LIMIT, newest_first
from tests.test_utils import FakeDataSource, make_branches, sale


def make_catalog(source: FakeDataSource) -> BranchCatalog:
    catalog = BranchCatalog(source)
    catalog.refresh()
    return catalog


def test_merged_newest_first_across_branches() -> None:
    source = FakeDataSource(
        branches=make_branches("One", "Two"),
        sales={
            1: [sale(1, "2025-03-01T09:00:00", 10.0, sale_id=1), sale(1, "2025-03-03T12:00:00", 30.0, sale_id=3)],
            2: [sale(2, "2025-03-02T08:30:00", 20.0, sale_id=2)],
        },
    )

    sales = asyncio.run(recent_sales(source, make_catalog(source), COMPANY_WIDE))

    assert [s.id for s in sales] == [3, 2, 1]
    assert ("branch-sales", 1) in source.calls
    assert ("branch-sales", 2) in source.calls


def test_capped_at_fifty_by_default() -> None:
    batch = [sale(1, f"2025-01-{day:02d}T10:00:00", 1.0, sale_id=day) for day in range(1, 29)]
    batch += [sale(1, f"2025-02-{day:02d}T10:00:00", 1.0, sale_id=100 + day) for day in range(1, 29)]
    source = FakeDataSource(branches=make_branches("One"), sales={1: batch})

    sales = asyncio.run(recent_sales(source, make_catalog(source), COMPANY_WIDE))

    assert DEFAULT_RECENT_LIMIT == 50
    assert len(sales) == 50
    assert sales[0].id == 128
    assert sales[-1].id == 7


def test_failed_branch_contributes_nothing() -> None:
    """Branch 2 errors: branch 1's sales still come back."""
    source = FakeDataSource(
        branches=make_branches("One", "Two"),
        sales={1: [sale(1, "2025-03-01", 10.0, sale_id=1)], 2: [sale(2, "2025-03-02", 20.0, sale_id=2)]},
        failing={2},
    )

    sales = asyncio.run(recent_sales(source, make_catalog(source), COMPANY_WIDE))

    assert [s.id for s in sales] == [1]


def test_every_branch_failing_gives_empty_list() -> None:
    source = FakeDataSource(branches=make_branches("One", "Two"), failing={1, 2})

    assert asyncio.run(recent_sales(source, make_catalog(source), COMPANY_WIDE)) == []


def test_single_branch_scope_fetches_that_branch_only() -> None:
    source = FakeDataSource(
        branches=make_branches("One", "Two"),
        sales={1: [sale(1, "2025-03-01", 10.0, sale_id=1)], 2: [sale(2, "2025-03-02", 20.0, sale_id=2)]},
    )
    consolidator = RecentSalesConsolidator(source, make_catalog(source))

    sales = asyncio.run(consolidator.recent_sales(Scope.single(2)))

    assert [s.id for s in sales] == [2]
    assert ("branch-sales", 1) not in source.calls


def test_negative_limit_raises() -> None:
    source = FakeDataSource(branches=make_branches("One"))
    consolidator = RecentSalesConsolidator(source, make_catalog(source))

    with pytest.raises(ValueError):
        asyncio.run(consolidator.recent_sales(COMPANY_WIDE, limit=-1))
    assert ("branch-sales", 1) not in source.calls


def test_newest_first_mixes_dates_and_datetimes() -> None:
    batches = [
        [sale(1, "2025-03-02", 1.0, sale_id=1)],
        [sale(2, "2025-03-02T18:45:00", 1.0, sale_id=2), sale(2, "2025-03-01T23:59:59", 1.0, sale_id=3)],
    ]

    assert [s.id for s in newest_first(batches)] == [2, 1, 3]


def test_newest_first_puts_unparseable_dates_last() -> None:
    batches = [[sale(1, "not a date", 1.0, sale_id=1), sale(1, "2025-03-02", 1.0, sale_id=2)]]

    assert [s.id for s in newest_first(batches)] == [2, 1]


def test_newest_first_keeps_input_order_for_ties() -> None:
    batches = [[sale(1, "2025-03-02", 1.0, sale_id=1)], [sale(2, "2025-03-02", 1.0, sale_id=2)]]

    assert [s.id for s in newest_first(batches)] == [1, 2]


def test_newest_first_zero_limit() -> None:
    assert newest_first([[sale(1, "2025-03-02", 1.0)]], limit=0) == []
