"""Repo Pulse SDK - High-level API behind the home screen."""

import inspect
import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import httpx

from repo_pulse.config import DEFAULT_API_URL, Config, parse_repository
from repo_pulse.exceptions import RepoPulseError
from repo_pulse.models.battery import BatteryStatus
from repo_pulse.models.repository import RepoSummary
from repo_pulse.services.battery import (
    BatteryListener,
    BatteryMonitor,
    BatteryProvider,
    PsutilBatteryProvider,
)
from repo_pulse.services.clock import ClockTicker
from repo_pulse.services.github_rest_client import GitHubRestClient
from repo_pulse.services.repo_collector import RepoInfoCollector
from repo_pulse.utils.rate_limiter import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)


class RepoPulse:
    """High-level SDK for the home screen data feeds.

    Combines a repository summary fetched from the GitHub REST API, a clock
    string refreshed every second, and battery status notifications.

    Example usage:
        ```python
        from repo_pulse import RepoPulse

        async with RepoPulse("octocat/Hello-World", token="ghp_xxx") as pulse:
            summary = await pulse.fetch_repo_summary()
            print(summary.commit_count, summary.closed_pr_count)

            pulse.start_clock()
            pulse.start_battery_monitoring(lambda status: print(status.description))
            print(pulse.current_time())
        ```

    Args:
        repository: Repository as "owner/name" (default: config.repository)
        token: GitHub personal access token (optional but recommended).
            Without a token, rate limits are 60 requests/hour.
        api_url: GitHub API base URL (default: https://api.github.com)
        config: Full configuration; overrides token and api_url when given
        battery_provider: Battery source (default: psutil)
        transport: httpx transport for the REST client (tests, proxies)
        per_page: Page size for commits and pull requests
        follow_link_header: Stop paginating when the Link header has no "next"
    """

    def __init__(
        self,
        repository: str | None = None,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        config: Config | None = None,
        battery_provider: BatteryProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        per_page: int | None = None,
        follow_link_header: bool = False,
    ):
        self._config = config or Config(github_token=token, github_api_url=api_url)
        if repository:
            owner, name = parse_repository(repository)
            self._config = replace(self._config, repo_owner=owner, repo_name=name)

        self._transport = transport
        self._per_page = per_page
        self._follow_link_header = follow_link_header

        self._rate_limiter: RateLimiter | None = None
        self._rest_client: GitHubRestClient | None = None
        self._initialized = False

        self._clock = ClockTicker(
            interval=self._config.clock_interval,
            fmt=self._config.clock_format,
        )
        self._battery = BatteryMonitor(
            battery_provider or PsutilBatteryProvider(self._config.battery_poll_interval)
        )

    @property
    def is_authenticated(self) -> bool:
        """Check if a token is configured."""
        return self._config.is_authenticated

    @property
    def repository(self) -> str | None:
        return self._config.repository

    async def __aenter__(self) -> "RepoPulse":
        """Async context manager entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _initialize(self) -> None:
        """Initialize clients."""
        if self._initialized:
            return

        self._rate_limiter = get_rate_limiter()
        self._rest_client = GitHubRestClient(
            config=self._config,
            rate_limiter=self._rate_limiter,
            transport=self._transport,
        )

        self._initialized = True
        logger.debug("RepoPulse initialized (authenticated=%s)", self.is_authenticated)

    async def close(self) -> None:
        """Stop the clock and battery monitoring and close HTTP connections."""
        self.stop_clock()
        self.stop_battery_monitoring()
        if self._rest_client:
            await self._rest_client.close()
        self._initialized = False
        logger.debug("RepoPulse closed")

    def _ensure_initialized(self) -> None:
        """Ensure the client is initialized."""
        if not self._initialized:
            raise RepoPulseError(
                "Client not initialized. Use 'async with RepoPulse(...) as pulse:'"
            )

    # Repository summary

    async def fetch_repo_summary(
        self,
        callback: Callable[[RepoSummary], Any] | None = None,
    ) -> RepoSummary:
        """Fetch commits, closed PRs, branches and contributors for the repository.

        The summary is returned once all four fetches have finished, and also
        passed to ``callback`` (sync or async) exactly once if given.

        Raises:
            RepoPulseError: If the client is not initialized or no repository
                is configured
        """
        self._ensure_initialized()
        if not self._config.repository:
            raise RepoPulseError(
                "No repository configured. Pass 'owner/name' or set REPO_PULSE_REPO"
            )

        logger.info("Fetching repository summary for %s", self._config.repository)

        collector = RepoInfoCollector(
            self._rest_client,
            per_page=self._per_page,
            follow_link_header=self._follow_link_header,
        )
        summary = await collector.collect_summary(self._config.repo_owner, self._config.repo_name)

        if summary.is_partial:
            logger.info(
                "Summary for %s is partial: %s",
                summary.repository,
                ", ".join(sorted(summary.errors)),
            )

        if callback is not None:
            result = callback(summary)
            if inspect.isawaitable(result):
                await result

        return summary

    # Clock

    def start_clock(self, on_tick: Callable[[str], None] | None = None) -> None:
        """Start (or re-arm) the once-per-second clock."""
        if on_tick is not None:
            self._clock.on_tick = on_tick
        self._clock.start()

    def stop_clock(self) -> None:
        self._clock.stop()

    def current_time(self) -> str:
        """Latest clock value formatted as yyyy-MM-dd HH:mm:ss ("" when stopped)."""
        return self._clock.current()

    # Battery

    def fetch_battery_info(self) -> BatteryStatus:
        """Read the battery status once."""
        return self._battery.snapshot()

    def start_battery_monitoring(self, listener: BatteryListener) -> None:
        """Deliver every battery change to ``listener``, replacing any earlier listener."""
        self._battery.start(listener)

    def stop_battery_monitoring(self) -> None:
        self._battery.stop()
