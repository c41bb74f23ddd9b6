"""GitHub REST API client."""

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from repo_pulse.config import Config, get_config
from repo_pulse.exceptions import (
    DecodeError,
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    NetworkError,
    RepoPulseError,
)
from repo_pulse.utils.pagination import Exhausted, PageRequest, next_page_state
from repo_pulse.utils.rate_limiter import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> dict:
    """Best-effort JSON body of an error response."""
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class GitHubRestClient:
    """Async client for GitHub REST API."""

    def __init__(
        self,
        config: Optional[Config] = None,
        rate_limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_config()
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "repo-pulse/0.1.0",
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.github_api_url,
                headers=self._get_headers(),
                timeout=self.config.request_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubRestClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send one request, retrying timeouts and connection failures."""
        await self.rate_limiter.acquire_rest()

        client = await self._get_client()
        response = await client.request(method, url, **kwargs)

        self.rate_limiter.update_rest_from_headers(response.headers)
        return response

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make an API request and map failures to SDK exceptions."""
        logger.debug("%s %s", method, url)
        try:
            response = await self._send(method, url, **kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {url} failed: {e!r}", url=url) from e

        if response.status_code == 404:
            raise GitHubNotFoundError(
                f"Resource not found: {url}",
                response_body=_error_body(response),
            )
        elif response.status_code in (403, 429):
            body = _error_body(response)
            message = body.get("message", "")
            if response.status_code == 429 or "rate limit" in message.lower():
                reset = response.headers.get("x-ratelimit-reset")
                raise GitHubRateLimitError(
                    "Rate limit exceeded",
                    status_code=response.status_code,
                    response_body=body,
                    reset_time=float(reset) if reset else None,
                )
            raise GitHubAPIError(
                f"Forbidden: {message or 'Unknown error'}",
                status_code=403,
                response_body=body,
            )
        elif response.status_code >= 500:
            raise GitHubAPIError(
                f"Server error: {response.status_code}",
                status_code=response.status_code,
            )
        elif response.status_code >= 400:
            body = _error_body(response)
            raise GitHubAPIError(
                f"API error: {body.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_body=body,
            )

        return response

    @staticmethod
    def _decode_list(response: httpx.Response, url: str) -> list[dict[str, Any]]:
        """Decode a response body that must be a JSON array."""
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {url}: {e}", url=url) from e
        if not isinstance(data, list):
            raise DecodeError(
                f"Expected a JSON array from {url}, got {type(data).__name__}",
                url=url,
            )
        return data

    async def get_list(self, endpoint: str, **kwargs) -> list[dict[str, Any]]:
        """Make a single GET request for an endpoint that returns a JSON array."""
        response = await self._request("GET", endpoint, **kwargs)
        return self._decode_list(response, endpoint)

    async def fetch_paginated(
        self,
        endpoint: str,
        per_page: Optional[int] = None,
        params: Optional[dict[str, str]] = None,
        max_pages: Optional[int] = None,
        follow_link_header: bool = False,
    ) -> list[dict[str, Any]]:
        """Fetch all pages of a paginated endpoint, one page at a time.

        A page shorter than ``per_page`` ends the fetch. When the last page is
        exactly full this costs one extra request for an empty page, unless
        ``follow_link_header`` is set, in which case a full page only continues
        when the response advertises a ``rel="next"`` link.

        Args:
            endpoint: API path, e.g. "/repos/octocat/hello/commits"
            per_page: Items per page (defaults to config.default_per_page)
            params: Extra query parameters, e.g. {"state": "closed"}
            max_pages: Maximum number of pages to fetch (None for all)
            follow_link_header: Use the Link header to detect the last page

        Returns:
            List of all items across all pages

        Raises:
            RepoPulseError: On the first failing page; ``partial_items`` holds
                the items fetched before it
        """
        per_page = per_page or self.config.default_per_page
        request = PageRequest(endpoint, page=1, per_page=per_page, params=dict(params or {}))
        all_items: list[dict[str, Any]] = []
        pages = 0

        while True:
            try:
                response = await self._request("GET", request.url)
                items = self._decode_list(response, request.url)
            except RepoPulseError as e:
                e.partial_items = list(all_items)
                raise

            all_items.extend(items)
            pages += 1

            state = next_page_state(
                request.page,
                len(items),
                per_page,
                link_header=response.headers.get("Link"),
                follow_link_header=follow_link_header,
            )
            if isinstance(state, Exhausted):
                break
            if max_pages is not None and pages >= max_pages:
                logger.debug("Stopping %s at max_pages=%d", endpoint, max_pages)
                break

            request = request.next()

        logger.debug("Fetched %d items from %s in %d page(s)", len(all_items), endpoint, pages)
        return all_items

    # Convenience methods for the repository endpoints

    async def get_repo_commits(
        self,
        owner: str,
        repo: str,
        per_page: Optional[int] = None,
        follow_link_header: bool = False,
    ) -> list[dict[str, Any]]:
        """Get every commit on the default branch."""
        return await self.fetch_paginated(
            f"/repos/{owner}/{repo}/commits",
            per_page=per_page,
            follow_link_header=follow_link_header,
        )

    async def get_closed_pulls(
        self,
        owner: str,
        repo: str,
        per_page: Optional[int] = None,
        follow_link_header: bool = False,
    ) -> list[dict[str, Any]]:
        """Get every closed pull request (merged or not)."""
        return await self.fetch_paginated(
            f"/repos/{owner}/{repo}/pulls",
            per_page=per_page,
            params={"state": "closed"},
            follow_link_header=follow_link_header,
        )

    async def get_branches(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """Get the first page of branches (API default page size)."""
        return await self.get_list(f"/repos/{owner}/{repo}/branches")

    async def get_contributors(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """Get the first page of contributors (API default page size)."""
        return await self.get_list(f"/repos/{owner}/{repo}/contributors")
