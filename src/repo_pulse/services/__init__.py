"""Services for the home screen: repository data, clock and battery."""

from repo_pulse.services.battery import (
    BatteryMonitor,
    BatteryProvider,
    InMemoryBatteryProvider,
    PsutilBatteryProvider,
    Subscription,
)
from repo_pulse.services.clock import ClockTicker
from repo_pulse.services.github_rest_client import GitHubRestClient
from repo_pulse.services.repo_collector import RepoInfoCollector

__all__ = [
    "GitHubRestClient",
    "RepoInfoCollector",
    "ClockTicker",
    "BatteryMonitor",
    "BatteryProvider",
    "InMemoryBatteryProvider",
    "PsutilBatteryProvider",
    "Subscription",
]
