"""Exceptions for the Repo Pulse SDK.

Exception Hierarchy:
    RepoPulseError (base)
    ├── GitHubAPIError (HTTP API errors with status codes)
    │   ├── GitHubRateLimitError (403/429 rate limit from API response)
    │   └── GitHubNotFoundError (404 not found)
    ├── NetworkError (transport failure, no HTTP response)
    ├── DecodeError (response body is not the expected JSON shape)
    └── RateLimitExceededError (local rate limit tracking, before making request)

Usage:
    - Errors raised while paginating carry ``partial_items``: whatever was
      accumulated before the failing page.
    - The repository collector never lets these escape a single resource
      pipeline; they end up in ``RepoSummary.errors`` instead.
"""

from typing import Any

__all__ = [
    "RepoPulseError",
    "GitHubAPIError",
    "GitHubRateLimitError",
    "GitHubNotFoundError",
    "NetworkError",
    "DecodeError",
    "RateLimitExceededError",
]


class RepoPulseError(Exception):
    """Base exception for all Repo Pulse errors."""

    def __init__(self, message: str, partial_items: list[Any] | None = None):
        super().__init__(message)
        self.partial_items: list[Any] = partial_items or []


class GitHubAPIError(RepoPulseError):
    """Base exception for GitHub API errors (HTTP responses with error status codes)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class GitHubRateLimitError(GitHubAPIError):
    """Raised when GitHub API returns a rate limit error (HTTP 403 or 429).

    For preemptive rate limiting (before making requests), see RateLimitExceededError.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = 403,
        response_body: dict | None = None,
        reset_time: float | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)
        self.reset_time = reset_time


class GitHubNotFoundError(GitHubAPIError):
    """Raised when a GitHub resource is not found (HTTP 404)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 404,
        response_body: dict | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)


class NetworkError(RepoPulseError):
    """Raised when a request fails at the transport level (DNS, connect, timeout)."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class DecodeError(RepoPulseError):
    """Raised when a response body cannot be decoded into the expected shape."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class RateLimitExceededError(RepoPulseError):
    """Raised by local rate limiter when limits are exhausted.

    This is a preemptive exception raised before making a request when the
    local rate limit tracker indicates no remaining requests.
    """

    pass
