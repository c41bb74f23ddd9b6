"""Configuration management for Repo Pulse."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CLOCK_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_repository(value: str) -> tuple[str, str]:
    """Split an ``owner/name`` string into its two parts.

    Raises:
        ValueError: If the value is not of the form ``owner/name``
    """
    parts = value.strip().strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Invalid repository: {value!r}. Use OWNER/NAME")
    return parts[0], parts[1]


@dataclass
class Config:
    """Application configuration."""

    github_token: str | None = None
    github_api_url: str = DEFAULT_API_URL

    # Repository shown on the home screen
    repo_owner: str | None = None
    repo_name: str | None = None

    # Rate limits
    rest_rate_limit: int = 5000  # requests per hour (authenticated)
    rest_rate_limit_unauth: int = 60  # requests per hour (unauthenticated)

    # Pagination
    default_per_page: int = 100

    # Timeouts
    request_timeout: float = 30.0

    # Clock and battery
    clock_interval: float = 1.0
    clock_format: str = DEFAULT_CLOCK_FORMAT
    battery_poll_interval: float = 5.0

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        # override=False ensures environment variables take precedence over .env
        load_dotenv(override=False)

        # Support both REPO_PULSE_TOKEN (preferred) and GITHUB_TOKEN (fallback)
        token = os.getenv("REPO_PULSE_TOKEN") or os.getenv("GITHUB_TOKEN")

        owner = name = None
        repository = os.getenv("REPO_PULSE_REPO")
        if repository:
            owner, name = parse_repository(repository)

        return cls(
            github_token=token,
            github_api_url=os.getenv("GITHUB_API_URL", DEFAULT_API_URL),
            repo_owner=owner,
            repo_name=name,
        )

    @property
    def is_authenticated(self) -> bool:
        """Check if a GitHub token is configured."""
        return bool(self.github_token)

    @property
    def effective_rate_limit(self) -> int:
        """Get the effective rate limit based on authentication status."""
        return self.rest_rate_limit if self.is_authenticated else self.rest_rate_limit_unauth

    @property
    def repository(self) -> str | None:
        """The configured repository as ``owner/name``, if any."""
        if self.repo_owner and self.repo_name:
            return f"{self.repo_owner}/{self.repo_name}"
        return None


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config
