"""Tests for the branch catalog and scope selection."""

import asyncio
from pathlib import Path

import pytest

from pos_dashboard.branches import CATALOG_ERROR_MESSAGE, BranchCatalog
from pos_dashboard.exceptions import CatalogUnavailable
from pos_dashboard.models import COMPANY_WIDE, Branch, Scope
from pos_dashboard.scope_store import InMemoryScopeStore, JsonFileScopeStore
from tests.test_utils import FakeDataSource, make_branches


@pytest.fixture
def source() -> FakeDataSource:
    return FakeDataSource(branches=make_branches("Kampala Road", "Closed Shop", "Ntinda", inactive=(2,)))


def test_only_active_branches_in_catalog_order(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)

    branches = catalog.refresh()

    assert [b.id for b in branches] == [1, 3]
    assert catalog.branches == branches
    assert catalog.error is None


def test_load_branches_raises_when_unavailable(source: FakeDataSource) -> None:
    source.catalog_down = True

    with pytest.raises(CatalogUnavailable) as exc_info:
        BranchCatalog(source).load_branches()

    assert exc_info.value.__cause__ is not None


def test_refresh_degrades_to_empty_catalog(source: FakeDataSource) -> None:
    """An unavailable catalog yields no branches and an error message, never an exception."""
    catalog = BranchCatalog(source)
    catalog.refresh()
    source.catalog_down = True

    assert catalog.refresh() == []
    assert catalog.branches == []
    assert catalog.error == CATALOG_ERROR_MESSAGE


def test_refresh_clears_previous_error(source: FakeDataSource) -> None:
    source.catalog_down = True
    catalog = BranchCatalog(source)
    catalog.refresh()
    source.catalog_down = False

    catalog.refresh()

    assert catalog.error is None
    assert len(catalog.branches) == 2


def test_default_scope_is_company_wide(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)
    catalog.refresh()

    assert catalog.get_scope() == COMPANY_WIDE
    assert catalog.is_company_wide


def test_set_scope_persists(source: FakeDataSource) -> None:
    store = InMemoryScopeStore()
    catalog = BranchCatalog(source, store)
    catalog.refresh()

    catalog.set_scope(Scope.single(3))
    assert store.load() == 3
    assert not catalog.is_company_wide

    catalog.set_scope(COMPANY_WIDE)
    assert store.load() is None


def test_persisted_scope_is_restored(source: FakeDataSource, tmp_path: Path) -> None:
    """A selection written by one catalog is picked up by the next one."""
    path = tmp_path / "state" / "scope.json"
    first = BranchCatalog(source, JsonFileScopeStore(path))
    first.refresh()
    first.set_scope(Scope.single(3))

    second = BranchCatalog(source, JsonFileScopeStore(path))
    second.refresh()

    assert second.get_scope() == Scope.single(3)


@pytest.mark.parametrize("stale_id", [2, 99])
def test_stale_persisted_scope_resets_to_company_wide(source: FakeDataSource, stale_id: int) -> None:
    """A stored branch that is inactive or gone falls back to company-wide and is cleared."""
    store = InMemoryScopeStore(stale_id)
    catalog = BranchCatalog(source, store)

    catalog.refresh()

    assert catalog.get_scope() == COMPANY_WIDE
    assert store.load() is None


def test_stored_scope_kept_when_catalog_unavailable(source: FakeDataSource) -> None:
    source.catalog_down = True
    store = InMemoryScopeStore(3)

    BranchCatalog(source, store).refresh()

    assert store.load() == 3


def test_find(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)
    catalog.refresh()

    assert catalog.find(3).name == "Ntinda"
    assert catalog.find(2) is None


def test_branches_for(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)
    catalog.refresh()

    assert [b.id for b in catalog.branches_for(COMPANY_WIDE)] == [1, 3]
    assert catalog.branches_for(Scope.single(1))[0].name == "Kampala Road"
    assert catalog.branches_for(Scope.single(7)) == [Branch.placeholder(7)]


def test_resolve_branches_loads_empty_catalog(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)

    branches = asyncio.run(catalog.resolve_branches(COMPANY_WIDE))

    assert [b.id for b in branches] == [1, 3]
    assert source.calls == [("branches",)]


def test_resolve_branches_does_not_reload_loaded_catalog(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)
    catalog.refresh()

    asyncio.run(catalog.resolve_branches(COMPANY_WIDE))

    assert source.calls == [("branches",)]


def test_concurrent_resolves_share_one_load(source: FakeDataSource) -> None:
    catalog = BranchCatalog(source)

    async def scenario():
        return await asyncio.gather(
            catalog.resolve_branches(COMPANY_WIDE),
            catalog.resolve_branches(COMPANY_WIDE),
            catalog.resolve_branches(Scope.single(3)),
        )

    everyone, again, single = asyncio.run(scenario())

    assert source.calls == [("branches",)]
    assert [b.id for b in everyone] == [b.id for b in again] == [1, 3]
    assert single[0].name == "Ntinda"


def test_resolve_branches_with_unavailable_catalog(source: FakeDataSource) -> None:
    source.catalog_down = True
    catalog = BranchCatalog(source)

    assert asyncio.run(catalog.resolve_branches(COMPANY_WIDE)) == []
    assert asyncio.run(catalog.resolve_branches(Scope.single(3))) == [Branch.placeholder(3)]
    assert catalog.error == CATALOG_ERROR_MESSAGE


def test_resolve_branches_retries_after_failure(source: FakeDataSource) -> None:
    source.catalog_down = True
    catalog = BranchCatalog(source)
    assert asyncio.run(catalog.resolve_branches(COMPANY_WIDE)) == []

    source.catalog_down = False

    assert [b.id for b in asyncio.run(catalog.resolve_branches(COMPANY_WIDE))] == [1, 3]
    assert catalog.error is None
