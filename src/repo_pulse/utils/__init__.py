"""Utility modules for Repo Pulse."""

from repo_pulse.utils.pagination import (
    Exhausted,
    HasMore,
    PageRequest,
    PageState,
    build_paginated_url,
    get_next_page_url,
    next_page_state,
    parse_link_header,
)
from repo_pulse.utils.rate_limiter import RateLimiter, get_rate_limiter, reset_rate_limiter

__all__ = [
    "RateLimiter",
    "get_rate_limiter",
    "reset_rate_limiter",
    "PageRequest",
    "PageState",
    "HasMore",
    "Exhausted",
    "next_page_state",
    "parse_link_header",
    "get_next_page_url",
    "build_paginated_url",
]
