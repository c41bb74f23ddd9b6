"""Repository data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Contributor(BaseModel):
    """Repository contributor from the Contributors API.

    Fields the SDK does not know about are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    login: str = ""
    id: int | None = None
    avatar_url: str = ""
    html_url: str = ""
    type: str = "User"
    contributions: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Contributor":
        """Create from GitHub REST API response."""
        return cls.model_validate(data)


class Commit(BaseModel):
    """Git commit data."""

    sha: str
    message: str = ""
    author: str = ""
    date: datetime | None = None
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Commit":
        """Create from GitHub Commits API response."""
        commit_data = _nested(data, "commit")
        author_data = _nested(commit_data, "author")
        return cls(
            sha=data.get("sha", ""),
            message=(commit_data.get("message") or "").split("\n")[0],  # First line only
            author=_nested(data, "author").get("login", author_data.get("name", "")),
            date=_parse_datetime(author_data.get("date")),
            url=data.get("html_url", ""),
        )


class PullRequest(BaseModel):
    """Pull request data."""

    number: int
    title: str = ""
    state: str = ""
    author: str = ""
    closed_at: datetime | None = None
    merged_at: datetime | None = None
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PullRequest":
        """Create from GitHub Pull Requests API response."""
        return cls(
            number=data.get("number", 0),
            title=data.get("title", ""),
            state=data.get("state", ""),
            author=_nested(data, "user").get("login", ""),
            closed_at=_parse_datetime(data.get("closed_at")),
            merged_at=_parse_datetime(data.get("merged_at")),
            url=data.get("html_url", ""),
        )

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


class Branch(BaseModel):
    """Repository branch."""

    name: str
    sha: str = ""
    protected: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Branch":
        """Create from GitHub Branches API response."""
        return cls(
            name=data.get("name", ""),
            sha=_nested(data, "commit").get("sha", ""),
            protected=data.get("protected", False),
        )


@dataclass
class FetchResult(Generic[T]):
    """Outcome of one resource pipeline: the items, plus the error if it failed.

    A failed result may still carry items (pages fetched before the failure).
    """

    resource: str
    items: list[T] = field(default_factory=list)
    error: Exception | None = None

    @classmethod
    def ok(cls, resource: str, items: list[T]) -> "FetchResult[T]":
        return cls(resource=resource, items=items)

    @classmethod
    def failed(
        cls, resource: str, error: Exception, items: list[T] | None = None
    ) -> "FetchResult[T]":
        return cls(resource=resource, items=items or [], error=error)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.items)


class RepoSummary(BaseModel):
    """Combined view of one repository, built once all fetches have finished."""

    model_config = ConfigDict(frozen=True)

    repository: str = ""
    commit_count: int = Field(default=0, ge=0)
    closed_pr_count: int = Field(default=0, ge=0)
    branch_count: int = Field(default=0, ge=0)
    contributors: list[Contributor] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)  # resource -> message
    fetched_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_results(
        cls,
        repository: str,
        commits: FetchResult,
        pulls: FetchResult,
        branches: FetchResult,
        contributors: FetchResult,
    ) -> "RepoSummary":
        """Build a summary from the four pipeline results."""
        errors = {
            result.resource: str(result.error) or type(result.error).__name__
            for result in (commits, pulls, branches, contributors)
            if result.error is not None
        }
        return cls(
            repository=repository,
            commit_count=commits.count,
            closed_pr_count=pulls.count,
            branch_count=branches.count,
            contributors=contributors.items,
            errors=errors,
        )

    @property
    def is_partial(self) -> bool:
        """True if at least one resource failed to load completely."""
        return bool(self.errors)

    @property
    def contributor_count(self) -> int:
        return len(self.contributors)

    @property
    def total_contributions(self) -> int:
        return sum(c.contributions for c in self.contributors)


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    if not isinstance(value, str) or not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _nested(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Nested object field; missing or null reads as empty.

    Raises:
        ValueError: If the field holds something other than an object
    """
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key!r} must be an object, got {type(value).__name__}")
    return value
