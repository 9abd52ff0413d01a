"""Settled fan-out/fan-in over branches.

Every aggregation issues one blocking API call per branch. The calls run
together in worker threads and are awaited as one batch that completes only
when every call has settled: a failing branch never cancels the others and
never short-circuits the batch. Each branch's outcome stays inspectable.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from pos_dashboard.exceptions import PerBranchFetchFailed
from pos_dashboard.models import Branch

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BranchOutcome(Generic[T]):
    """Result of one branch's fetch.

    Attributes:
        branch: The branch the fetch was issued for.
        value: The fetched value, or None when the fetch failed.
        error: The contained failure, or None on success.

    """

    branch: Branch
    value: T | None = None
    error: PerBranchFetchFailed | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(
    branches: Sequence[Branch],
    fetch: Callable[[Branch], T],
    *,
    label: str,
    limit: int | None = None,
) -> list[BranchOutcome[T]]:
    """Run ``fetch(branch)`` for every branch concurrently and collect all outcomes.

    Args:
        branches: Branches to fetch, in the order results should come back.
        fetch: Blocking callable performing one branch's fetch.
        label: Short name used in logs and errors (e.g. "sales").
        limit: Optional bound on simultaneous fetches.

    Returns:
        One BranchOutcome per branch, in input order regardless of which
        fetch finished first.

    """
    semaphore = asyncio.Semaphore(limit) if limit else None

    async def run_one(branch: Branch) -> T:
        if semaphore is None:
            return await asyncio.to_thread(fetch, branch)
        async with semaphore:
            return await asyncio.to_thread(fetch, branch)

    results = await asyncio.gather(
        *(run_one(branch) for branch in branches), return_exceptions=True
    )

    outcomes: list[BranchOutcome[T]] = []
    for branch, result in zip(branches, results):
        if isinstance(result, Exception):
            error = PerBranchFetchFailed(branch.id, label, result)
            error.__cause__ = result
            logger.warning("Failed to fetch %s for branch %s (%s): %s", label, branch.id, branch.name, result)
            outcomes.append(BranchOutcome(branch=branch, error=error))
        elif isinstance(result, BaseException):
            # Cancellation and interpreter exits are not branch failures
            raise result
        else:
            outcomes.append(BranchOutcome(branch=branch, value=result))

    failed = sum(1 for o in outcomes if not o.ok)
    if failed:
        logger.info("%s fan-out: %d of %d branch(es) failed", label, failed, len(outcomes))
    return outcomes
