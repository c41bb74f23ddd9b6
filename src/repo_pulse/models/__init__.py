"""Data models for Repo Pulse."""

from repo_pulse.models.battery import BatteryColor, BatteryState, BatteryStatus
from repo_pulse.models.repository import (
    Branch,
    Commit,
    Contributor,
    FetchResult,
    PullRequest,
    RepoSummary,
)

__all__ = [
    "RepoSummary",
    "Contributor",
    "Commit",
    "PullRequest",
    "Branch",
    "FetchResult",
    "BatteryStatus",
    "BatteryState",
    "BatteryColor",
]
