"""Persistence of the selected branch scope.

The selected scope is the only client-persisted state of the dashboard.
It is stored behind a small interface (load/save/clear) so the catalog can
be tested without a filesystem and the backend can be swapped for a
server-side session store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

SCOPE_KEY = "selectedBranchId"


class ScopeStore(Protocol):
    """Storage for the selected branch id. No stored id means company-wide."""

    def load(self) -> int | None: ...

    def save(self, branch_id: int) -> None: ...

    def clear(self) -> None: ...


class InMemoryScopeStore:
    """ScopeStore kept in process memory."""

    def __init__(self, branch_id: int | None = None) -> None:
        self.branch_id = branch_id

    def load(self) -> int | None:
        return self.branch_id

    def save(self, branch_id: int) -> None:
        self.branch_id = branch_id

    def clear(self) -> None:
        self.branch_id = None


class JsonFileScopeStore:
    """ScopeStore backed by a small JSON file, e.g. ``{"selectedBranchId": 3}``.

    A missing file means no selection. A file that cannot be read or parsed
    is logged and treated as no selection, so a corrupt state file never
    keeps the dashboard from starting.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> int | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            value = data.get(SCOPE_KEY) if isinstance(data, dict) else None
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable scope file %s: %s", self.path, e)
            return None
        if value is None:
            return None
        # Only a JSON integer is a branch id; bool is an int subclass
        if not isinstance(value, int) or isinstance(value, bool):
            logger.warning("Ignoring non-integer %s=%r in %s", SCOPE_KEY, value, self.path)
            return None
        return value

    def save(self, branch_id: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({SCOPE_KEY: int(branch_id)}), encoding="utf-8")
        logger.debug("Saved scope branch %s to %s", branch_id, self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
