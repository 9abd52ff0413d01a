"""Unified configuration for the POS dashboard.

This module provides a single, simple configuration class used across
the API client, the scope store and the aggregators.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pos_dashboard.exceptions import ConfigError

DEFAULT_TIMEOUT = 60.0
DEFAULT_RETRIES = 3
DEFAULT_DAYS = 30
DEFAULT_LOW_STOCK_CAP = 20
DEFAULT_STATE_DIR = Path("~/.pos_dashboard")


@dataclass
class DashboardConfig:
    """Settings for talking to the POS API and storing client state.

    Attributes:
        base_url: API root, e.g. "http://localhost:8081/api" (no trailing slash).
        token: Bearer token sent with every request, or None.
        timeout: Default request timeout in seconds.
        retries: Retry attempts for 429/5xx responses and connection errors.
        state_dir: Directory holding client-persisted state (selected scope).
        max_concurrency: Upper bound on in-flight per-branch fetches.
            None means every branch is fetched at once.
        default_days: Length of the sales chart when none is requested.
        low_stock_cap: Maximum number of rows in the low-stock list.

    Directory Structure:
        state_dir/
        └── scope.json       # {"selectedBranchId": 3}

    """

    base_url: str
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    state_dir: Path = DEFAULT_STATE_DIR
    max_concurrency: int | None = None
    default_days: int = DEFAULT_DAYS
    low_stock_cap: int = DEFAULT_LOW_STOCK_CAP

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigError("base_url must not be empty")
        self.base_url = self.base_url.rstrip("/")
        if isinstance(self.state_dir, str):
            self.state_dir = Path(self.state_dir)
        self.state_dir = self.state_dir.expanduser()
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.retries < 0:
            raise ConfigError(f"retries must be >= 0, got {self.retries}")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ConfigError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.default_days < 1:
            raise ConfigError(f"default_days must be >= 1, got {self.default_days}")
        if self.low_stock_cap < 0:
            raise ConfigError(f"low_stock_cap must be >= 0, got {self.low_stock_cap}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DashboardConfig:
        """Create a DashboardConfig from environment variables.

        Variables:
            POS_API_BASE: API root URL (required).
            POS_API_TOKEN: Bearer token (optional).
            POS_API_TIMEOUT: Request timeout in seconds (default 60).
            POS_API_RETRIES: Retry attempts (default 3).
            POS_STATE_DIR: Client state directory (default ~/.pos_dashboard).
            POS_MAX_CONCURRENCY: Bound on parallel branch fetches (default unbounded).

        Args:
            environ: Mapping to read instead of os.environ (useful in tests).

        Returns:
            DashboardConfig instance.

        Raises:
            ConfigError: If POS_API_BASE is missing or a value cannot be parsed.

        Examples:
            >>> cfg = DashboardConfig.from_env({"POS_API_BASE": "http://localhost:8081/api/"})
            >>> cfg.base_url
            'http://localhost:8081/api'

        """
        env = os.environ if environ is None else environ

        base_url = env.get("POS_API_BASE", "").strip().strip('"').strip("'")
        if not base_url:
            raise ConfigError("POS_API_BASE is not set")

        token = env.get("POS_API_TOKEN") or None
        concurrency_raw = env.get("POS_MAX_CONCURRENCY")

        return cls(
            base_url=base_url,
            token=token,
            timeout=_parse_number(env, "POS_API_TIMEOUT", DEFAULT_TIMEOUT, float),
            retries=_parse_number(env, "POS_API_RETRIES", DEFAULT_RETRIES, int),
            state_dir=Path(env.get("POS_STATE_DIR", str(DEFAULT_STATE_DIR))),
            max_concurrency=(
                _parse_number(env, "POS_MAX_CONCURRENCY", 0, int) if concurrency_raw else None
            ),
        )

    @property
    def scope_file(self) -> Path:
        """JSON file holding the persisted branch selection."""
        return self.state_dir / "scope.json"


def _parse_number(env: Mapping[str, str], name: str, default, kind):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
