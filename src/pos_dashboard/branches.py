"""Branch catalog and scope selection.

This module loads the set of active branches from the POS API and tracks
the selected scope (one branch, or company-wide), persisted through an
injected ScopeStore so it survives restarts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pos_dashboard.exceptions import CatalogUnavailable
from pos_dashboard.models import COMPANY_WIDE, Branch, Scope
from pos_dashboard.scope_store import InMemoryScopeStore

if TYPE_CHECKING:
    from pos_dashboard.client import BranchDataSource
    from pos_dashboard.scope_store import ScopeStore

logger = logging.getLogger(__name__)

CATALOG_ERROR_MESSAGE = "Failed to load branches"


class BranchCatalog:
    """Catalog of active branches plus the current scope selection.

    Example:
        >>> from pos_dashboard.branches import BranchCatalog
        >>> from pos_dashboard.scope_store import JsonFileScopeStore
        >>>
        >>> catalog = BranchCatalog(client, JsonFileScopeStore(config.scope_file))
        >>> catalog.refresh()
        [Branch(id=1, name='Kampala Road', ...), Branch(id=2, name='Ntinda', ...)]
        >>> catalog.set_scope(Scope.single(2))
        >>> catalog.get_scope()
        Scope(branch_id=2)

    """

    def __init__(self, source: BranchDataSource, store: ScopeStore | None = None) -> None:
        """Initialize the catalog.

        Args:
            source: Data source providing list_branches().
            store: Persistence for the selected scope. Defaults to an
                in-memory store.

        """
        self.source = source
        self.store = store if store is not None else InMemoryScopeStore()
        self.branches: list[Branch] = []
        self.error: str | None = None
        self._scope: Scope = COMPANY_WIDE
        self._loading: asyncio.Task[list[Branch]] | None = None

    def load_branches(self) -> list[Branch]:
        """Fetch the branch list and keep only active branches, in catalog order.

        Returns:
            List of active branches.

        Raises:
            CatalogUnavailable: If the branch list cannot be retrieved.

        """
        try:
            all_branches = self.source.list_branches()
        except Exception as e:
            raise CatalogUnavailable(f"{CATALOG_ERROR_MESSAGE}: {e}") from e
        active = [b for b in all_branches if b.is_active]
        logger.info("Loaded %d active branch(es) of %d", len(active), len(all_branches))
        return active

    def refresh(self) -> list[Branch]:
        """Reload the catalog and restore the persisted scope.

        Never raises for an unavailable catalog: the branch set falls back to
        empty and ``error`` carries a message for the caller to display.

        Returns:
            The active branches now in the catalog.

        """
        try:
            self.branches = self.load_branches()
        except CatalogUnavailable as e:
            logger.error("%s", e)
            self.branches = []
            self.error = CATALOG_ERROR_MESSAGE
            return []

        self.error = None
        self._restore_scope()
        return self.branches

    def _restore_scope(self) -> None:
        saved_id = self.store.load()
        if saved_id is None:
            self._scope = COMPANY_WIDE
            return
        if self.find(saved_id) is not None:
            self._scope = Scope.single(saved_id)
            return
        # Saved branch no longer exists or is inactive
        logger.info("Stored branch %s is not active anymore; resetting to company-wide", saved_id)
        self.store.clear()
        self._scope = COMPANY_WIDE

    def set_scope(self, scope: Scope) -> None:
        """Select a scope and persist it."""
        self._scope = scope
        if scope.is_company_wide:
            self.store.clear()
        else:
            self.store.save(scope.branch_id)

    def get_scope(self) -> Scope:
        return self._scope

    @property
    def is_company_wide(self) -> bool:
        return self._scope.is_company_wide

    def find(self, branch_id: int) -> Branch | None:
        for branch in self.branches:
            if branch.id == branch_id:
                return branch
        return None

    def branches_for(self, scope: Scope) -> list[Branch]:
        """Branches covered by a scope, using a placeholder for an unknown single branch."""
        if scope.is_company_wide:
            return list(self.branches)
        found = self.find(scope.branch_id)
        return [found if found is not None else Branch.placeholder(scope.branch_id)]

    async def ensure_loaded(self) -> list[Branch]:
        """Load the catalog in a worker thread if it is still empty.

        Concurrent callers on the same event loop share one in-flight load,
        so the views of a single dashboard refresh trigger one branch-list
        request between them. A failed load leaves the catalog empty with
        ``error`` set; the next call tries again.
        """
        if self.branches:
            return self.branches
        loop = asyncio.get_running_loop()
        pending = self._loading
        if pending is None or pending.done() or pending.get_loop() is not loop:
            pending = loop.create_task(asyncio.to_thread(self.refresh))
            self._loading = pending
        return await asyncio.shield(pending)

    async def resolve_branches(self, scope: Scope) -> list[Branch]:
        """Branches an aggregation should fetch for a scope.

        Every aggregator goes through here, so all views of one refresh agree
        on the branch set. An empty catalog is loaded first (off the event
        loop); if that fails, company-wide resolves to no branches and a
        single branch to its placeholder.
        """
        if not self.branches:
            await self.ensure_loaded()
        return self.branches_for(scope)
