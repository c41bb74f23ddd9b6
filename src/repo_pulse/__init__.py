"""Repo Pulse - Data feeds for a repository dashboard home screen.

This SDK provides:
- A repository summary (commits, closed pull requests, branches, contributors)
  fetched concurrently from the GitHub REST API
- A clock string refreshed once per second
- Battery status change notifications

Example usage:
    ```python
    from repo_pulse import RepoPulse

    async with RepoPulse("octocat/Hello-World", token="ghp_xxx") as pulse:
        summary = await pulse.fetch_repo_summary()
        print(f"Commits: {summary.commit_count}")
    ```
"""

from repo_pulse.config import Config
from repo_pulse.exceptions import (
    DecodeError,
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    NetworkError,
    RateLimitExceededError,
    RepoPulseError,
)
from repo_pulse.models import (
    BatteryColor,
    BatteryState,
    BatteryStatus,
    Branch,
    Commit,
    Contributor,
    FetchResult,
    PullRequest,
    RepoSummary,
)
from repo_pulse.sdk import RepoPulse

__version__ = "0.1.0"

__all__ = [
    # Main SDK class
    "RepoPulse",
    # Configuration
    "Config",
    # Exceptions
    "RepoPulseError",
    "GitHubAPIError",
    "GitHubRateLimitError",
    "GitHubNotFoundError",
    "NetworkError",
    "DecodeError",
    "RateLimitExceededError",
    # Models - Repository
    "RepoSummary",
    "Contributor",
    "Commit",
    "PullRequest",
    "Branch",
    "FetchResult",
    # Models - Battery
    "BatteryStatus",
    "BatteryState",
    "BatteryColor",
]
