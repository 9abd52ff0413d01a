"""HTTP client for the POS REST API.

Only the read endpoints the dashboard consolidates are wrapped here:

    GET /branches                                     -> list_branches()
    GET /sales/branch/{id}                            -> branch_sales()
    GET /sales/branch/{id}/range?startDate=&endDate=  -> sales_in_range()
    GET /stock/branch/{id}/low                        -> low_stock()
    GET /stock/branch/{id}                            -> branch_stock()
    GET /dashboard/stats[?branchId=]                  -> branch_stats()

Environment:
    POS_API_BASE     e.g. http://localhost:8081/api
    POS_API_TOKEN    bearer token issued by the API's login endpoint
    POS_API_TIMEOUT  seconds (default 60)
    POS_API_RETRIES  retry attempts on 429/5xx (default 3)

Every call raises ApiError (or AuthenticationError for 401/403) on failure;
callers that fan out over branches contain those errors per branch.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pos_dashboard.config import DEFAULT_RETRIES, DEFAULT_TIMEOUT, DashboardConfig
from pos_dashboard.exceptions import ApiError, AuthenticationError
from pos_dashboard.models import Branch, BranchStats, SaleRecord, StockLevelRecord
from pos_dashboard.utils import format_date

logger = logging.getLogger(__name__)


class BranchDataSource(Protocol):
    """Per-branch read access to the POS backend.

    Each method retrieves one branch's slice of data and may fail
    independently of the others.
    """

    def list_branches(self) -> list[Branch]: ...

    def sales_in_range(self, branch_id: int, start: date, end: date) -> list[SaleRecord]: ...

    def branch_sales(self, branch_id: int) -> list[SaleRecord]: ...

    def low_stock(self, branch_id: int) -> list[StockLevelRecord]: ...

    def branch_stock(self, branch_id: int) -> list[StockLevelRecord]: ...

    def branch_stats(self, branch_id: int | None = None) -> BranchStats: ...

    def close(self) -> None: ...


# --- HTTP resiliency ---
def make_session(
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
    token: str | None = None,
) -> requests.Session:
    """Create a requests Session with retry logic and default timeout.

    Configures the session with:
    - JSON Accept header and, when given, a bearer Authorization header
    - Retry adapter for HTTP/HTTPS with exponential backoff
    - Default timeout for all requests
    - Retries on 429, 500, 502, 503, 504 status codes

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts.
        token: Bearer token for the Authorization header.

    Returns:
        Configured requests.Session object.

    """
    s = requests.Session()
    s.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
    if token:
        s.headers["Authorization"] = f"Bearer {token}"
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,  # 0.8, 1.6, 3.2, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    # Default timeouts via a wrapper
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def ensure_ok(resp: requests.Response, msg: str) -> None:
    """Check if HTTP response is successful, raise ApiError if not.

    Raises:
        AuthenticationError: On 401 or 403.
        ApiError: On any other status outside 200-299.

    """
    if 200 <= resp.status_code < 300:
        return
    detail = f"{msg}. HTTP {resp.status_code}: {resp.text[:400]}"
    if resp.status_code in (401, 403):
        raise AuthenticationError(detail, status_code=resp.status_code)
    raise ApiError(detail, status_code=resp.status_code)


class PosApiClient:
    """Read-only client for the POS REST API.

    Example:
        >>> from pos_dashboard import DashboardConfig
        >>> from pos_dashboard.client import PosApiClient
        >>>
        >>> client = PosApiClient(DashboardConfig(base_url="http://localhost:8081/api"))
        >>> [b.name for b in client.list_branches()]
        ['Kampala Road', 'Ntinda', ...]

    """

    def __init__(
        self,
        config: DashboardConfig,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.session = session or make_session(
            timeout=config.timeout, retries=config.retries, token=config.token
        )

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.config.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            resp = self.session.get(url, params=params)
        except requests.RequestException as e:
            raise ApiError(f"GET {path} failed: {e}") from e
        ensure_ok(resp, f"GET {path} failed")
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(f"GET {path} returned invalid JSON", status_code=resp.status_code) from e

    def _get_list(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        data = self._get(path, params)
        if not isinstance(data, list):
            raise ApiError(f"GET {path} returned {type(data).__name__}, expected a list")
        return data

    def list_branches(self) -> list[Branch]:
        """All branches, active and inactive, in API order."""
        return [Branch.from_api(item) for item in self._get_list("/branches")]

    def branch_sales(self, branch_id: int) -> list[SaleRecord]:
        """Every sale of one branch, in API order."""
        items = self._get_list(f"/sales/branch/{branch_id}")
        return [SaleRecord.from_api(item) for item in items]

    def sales_in_range(self, branch_id: int, start: date, end: date) -> list[SaleRecord]:
        """Sales of one branch between two calendar dates (inclusive)."""
        params = {"startDate": format_date(start), "endDate": format_date(end)}
        items = self._get_list(f"/sales/branch/{branch_id}/range", params)
        return [SaleRecord.from_api(item) for item in items]

    def low_stock(self, branch_id: int) -> list[StockLevelRecord]:
        """Stock items of one branch at or below their reorder level."""
        items = self._get_list(f"/stock/branch/{branch_id}/low")
        return [StockLevelRecord.from_api(item) for item in items]

    def branch_stock(self, branch_id: int) -> list[StockLevelRecord]:
        """Every stock item of one branch."""
        items = self._get_list(f"/stock/branch/{branch_id}")
        return [StockLevelRecord.from_api(item) for item in items]

    def branch_stats(self, branch_id: int | None = None) -> BranchStats:
        """Summary statistics for one branch, or company-wide when branch_id is None."""
        params = {"branchId": branch_id} if branch_id is not None else None
        data = self._get("/dashboard/stats", params)
        if not isinstance(data, dict):
            raise ApiError(f"GET /dashboard/stats returned {type(data).__name__}, expected an object")
        return BranchStats.from_api(data)

    def close(self) -> None:
        self.session.close()
