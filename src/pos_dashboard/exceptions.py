"""Domain-specific exceptions for the POS dashboard.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from PosAPIError for easy catching.
"""

from __future__ import annotations


class PosAPIError(Exception):
    """Base exception for all POS dashboard errors.

    Users can catch this exception to handle any error raised by the
    package, from configuration problems to failed API calls.
    """

    pass


class ConfigError(PosAPIError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - An environment variable cannot be parsed
    """

    pass


class ApiError(PosAPIError):
    """Raised when a call to the POS REST API fails.

    This exception is raised when:
    - The API answers with a non-2xx status code
    - The connection fails or times out
    - The response body is not the JSON shape we expect

    Attributes:
        status_code: HTTP status code, or None for transport errors.

    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ApiError):
    """Raised when the API rejects the bearer token (HTTP 401/403)."""

    pass


class CatalogUnavailable(PosAPIError):
    """Raised when the branch list cannot be retrieved.

    Consumers degrade to an empty branch set and report the error upward
    instead of crashing; see BranchCatalog.refresh().
    """

    pass


class PerBranchFetchFailed(PosAPIError):
    """A single branch's data could not be fetched.

    Never raised to the caller of an aggregation. It is attached to the
    branch's BranchOutcome so the failure can be inspected, and the branch
    then contributes an empty (or absent) value.

    Attributes:
        branch_id: Id of the branch whose fetch failed.
        label: Short name of the fetch (e.g. "sales", "low-stock").

    """

    def __init__(self, branch_id: int, label: str, cause: BaseException | None = None) -> None:
        message = f"{label} fetch failed for branch {branch_id}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.branch_id = branch_id
        self.label = label


class UnsupportedOperation(PosAPIError):
    """An aggregation was requested in a scope where it has no meaning.

    Ranking a single branch against itself is the main example. Aggregators
    return an empty result in that case; the exception is available for
    callers that prefer to raise.
    """

    pass
