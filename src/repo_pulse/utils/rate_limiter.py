"""Rate limit tracking for GitHub REST API requests."""

import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx
from rich.console import Console

from repo_pulse.exceptions import RateLimitExceededError

console = Console(stderr=True)

# Warn when fewer requests than this remain
LOW_REMAINING_THRESHOLD = 10


def format_time_remaining(seconds: float) -> str:
    """Format seconds as "now", "30 seconds", "1 min 30 sec", "2 hours" and so on."""
    seconds = int(seconds)
    if seconds <= 0:
        return "now"
    if seconds < 60:
        return f"{seconds} second{'' if seconds == 1 else 's'}"

    if seconds < 3600:
        minutes, secs = divmod(seconds, 60)
        if secs:
            return f"{minutes} min {secs} sec"
        return f"{minutes} minute{'' if minutes == 1 else 's'}"

    hours, minutes = divmod(seconds // 60, 60)
    if minutes:
        return f"{hours} hr {minutes} min"
    return f"{hours} hour{'' if hours == 1 else 's'}"


def format_reset_time(reset_timestamp: float) -> str:
    """Local wall-clock time (HH:MM:SS) of a Unix reset timestamp."""
    return datetime.fromtimestamp(reset_timestamp).strftime("%H:%M:%S")


@dataclass
class RateLimitState:
    """Known budget of one rate limit window."""

    limit: int
    remaining: int
    reset_time: float  # Unix timestamp

    @classmethod
    def default(cls, authenticated: bool = True) -> "RateLimitState":
        limit = 5000 if authenticated else 60
        return cls(limit=limit, remaining=limit, reset_time=time.time() + 3600)

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    @property
    def seconds_until_reset(self) -> float:
        return max(0.0, self.reset_time - time.time())

    def describe_reset(self) -> str:
        return (
            f"{format_time_remaining(self.seconds_until_reset)} "
            f"(at {format_reset_time(self.reset_time)})"
        )

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Apply the x-ratelimit-* headers GitHub sends with each response."""
        headers = httpx.Headers(headers)
        if "x-ratelimit-limit" in headers:
            self.limit = int(headers["x-ratelimit-limit"])
        if "x-ratelimit-remaining" in headers:
            self.remaining = int(headers["x-ratelimit-remaining"])
        if "x-ratelimit-reset" in headers:
            self.reset_time = float(headers["x-ratelimit-reset"])


@dataclass
class RateLimiter:
    """Client-side view of the REST API rate limit.

    Starts from the authenticated budget and is corrected by the headers of
    every response.
    """

    rest: RateLimitState = field(default_factory=RateLimitState.default)

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire_rest(self, cost: int = 1) -> None:
        """Reserve ``cost`` requests from the current window.

        Raises:
            RateLimitExceededError: If the budget is spent and the window has not reset
        """
        async with self._lock:
            state = self.rest
            if state.remaining < cost:
                if state.seconds_until_reset > 0:
                    raise RateLimitExceededError(
                        f"Rate limit exceeded. Resets in {state.describe_reset()}"
                    )
                # New window; headers of the next response correct this guess
                state.remaining = state.limit
            state.remaining -= cost

    def update_rest_from_headers(self, headers: Mapping[str, str]) -> None:
        self.rest.update_from_headers(headers)

    def get_status(self) -> dict:
        """Current REST budget as a plain dict."""
        return {
            "rest": {
                "remaining": self.rest.remaining,
                "limit": self.rest.limit,
                "reset_in": self.rest.seconds_until_reset,
            },
        }


# Global rate limiter instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the global rate limiter (useful for testing)."""
    global _rate_limiter
    _rate_limiter = None


async def check_rate_limit_from_api(
    api_url: str = "https://api.github.com",
    token: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RateLimitState:
    """Ask GitHub for the current core (REST) rate limit.

    The /rate_limit endpoint does not count against the budget. When it cannot
    be reached the unauthenticated default is returned so the caller can go on.
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": "repo-pulse/0.1.0",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.get(f"{api_url}/rate_limit", headers=headers)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected /rate_limit body: {type(data).__name__}")
        core = data.get("resources", {}).get("core", {})
    except (httpx.HTTPError, ValueError) as e:
        console.print(f"[dim]Could not check rate limit: {e}[/dim]")
        return RateLimitState.default(authenticated=False)

    fallback = RateLimitState.default(authenticated=bool(token))
    return RateLimitState(
        limit=core.get("limit", fallback.limit),
        remaining=core.get("remaining", fallback.remaining),
        reset_time=core.get("reset", fallback.reset_time),
    )


def check_and_report_rate_limit(state: RateLimitState, is_authenticated: bool) -> bool:
    """Print the rate limit situation.

    Returns:
        True if there is budget left for a summary, False if it is exhausted
    """
    if state.is_exhausted:
        console.print(f"\n[red]Rate limit exhausted[/red] (0/{state.limit} requests remaining)")
        console.print(f"[yellow]  Resets in: {state.describe_reset()}[/yellow]")
        if not is_authenticated:
            console.print(
                "[dim]  Tip: Set REPO_PULSE_TOKEN for 5,000 requests/hour instead of 60[/dim]"
            )
        console.print()
        return False

    # A summary costs at least four requests
    if state.remaining < LOW_REMAINING_THRESHOLD:
        console.print(
            f"[yellow]Warning: Only {state.remaining}/{state.limit} "
            "API requests remaining[/yellow]"
        )
    return True
