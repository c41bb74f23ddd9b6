"""Pagination utilities for GitHub API."""

import re
from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import parse_qsl, urlencode, urlparse


@dataclass(frozen=True)
class PageRequest:
    """One page of a paginated fetch."""

    endpoint: str
    page: int = 1
    per_page: int = 100
    params: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {self.per_page}")

    @property
    def url(self) -> str:
        return build_paginated_url(self.endpoint, self.page, self.per_page, self.params)

    def next(self) -> "PageRequest":
        return PageRequest(self.endpoint, self.page + 1, self.per_page, self.params)


@dataclass(frozen=True)
class HasMore:
    """Another page should be requested."""

    next_page: int


@dataclass(frozen=True)
class Exhausted:
    """No more pages."""


PageState = Union[HasMore, Exhausted]


def next_page_state(
    page: int,
    item_count: int,
    per_page: int,
    link_header: Optional[str] = None,
    follow_link_header: bool = False,
) -> PageState:
    """Decide whether pagination continues after a page.

    A page with fewer than ``per_page`` items (including an empty one) is the
    last page. A full page means there may be more; with
    ``follow_link_header`` a full page only continues if the response
    advertised a ``rel="next"`` link.
    """
    if item_count == 0 or item_count < per_page:
        return Exhausted()
    if follow_link_header and get_next_page_url(link_header) is None:
        return Exhausted()
    return HasMore(page + 1)


def parse_link_header(link_header: Optional[str]) -> dict[str, str]:
    """Parse GitHub's Link header into a dictionary of rel -> url.

    Example Link header:
    <https://api.github.com/repos/octocat/hello/commits?page=2>; rel="next",
    <https://api.github.com/repos/octocat/hello/commits?page=5>; rel="last"

    Returns:
        dict: {"next": "url", "last": "url", "prev": "url", "first": "url"}
    """
    if not link_header:
        return {}

    links = {}
    # Pattern to match <url>; rel="name"
    pattern = r'<([^>]+)>;\s*rel="([^"]+)"'

    for match in re.finditer(pattern, link_header):
        url, rel = match.groups()
        links[rel] = url

    return links


def get_next_page_url(link_header: Optional[str]) -> Optional[str]:
    """Extract the 'next' page URL from a Link header."""
    links = parse_link_header(link_header)
    return links.get("next")


def build_paginated_url(
    base_url: str,
    page: int,
    per_page: int = 100,
    params: Optional[dict[str, str]] = None,
) -> str:
    """Build a URL (absolute or a path) with pagination parameters.

    Args:
        base_url: The base URL or API path (may already have query parameters)
        page: Page number (1-indexed)
        per_page: Items per page (max 100 for most GitHub APIs)
        params: Extra query parameters, e.g. {"state": "closed"}

    Returns:
        URL with the extra params, then per_page and page
    """
    parsed = urlparse(base_url)
    query = dict(parse_qsl(parsed.query))
    query.update(params or {})

    # Pagination params always come last and override
    query.pop("per_page", None)
    query.pop("page", None)
    query["per_page"] = str(per_page)
    query["page"] = str(page)

    prefix = f"{parsed.scheme}://{parsed.netloc}" if parsed.scheme else ""
    return f"{prefix}{parsed.path}?{urlencode(query)}"
