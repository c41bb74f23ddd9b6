"""Repository summary collector service."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from repo_pulse.exceptions import DecodeError, RepoPulseError
from repo_pulse.models.repository import (
    Branch,
    Commit,
    Contributor,
    FetchResult,
    PullRequest,
    RepoSummary,
)
from repo_pulse.services.github_rest_client import GitHubRestClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepoInfoCollector:
    """Collects commit, closed PR, branch and contributor data for one repository."""

    def __init__(
        self,
        rest_client: GitHubRestClient,
        per_page: int | None = None,
        follow_link_header: bool = False,
    ):
        self.rest_client = rest_client
        self.per_page = per_page
        self.follow_link_header = follow_link_header

    async def collect_summary(self, owner: str, repo: str) -> RepoSummary:
        """Fetch the four resources concurrently and combine them.

        Each resource resolves to a FetchResult whether it succeeds or not, so
        the summary is always built once all four have finished. A failure in
        one resource leaves the other fields untouched and is recorded in
        ``RepoSummary.errors``.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            RepoSummary for owner/repo
        """
        full_name = f"{owner}/{repo}"
        logger.debug("Collecting summary for %s", full_name)

        commits, pulls, branches, contributors = await asyncio.gather(
            self._collect(
                "commits",
                lambda: self.rest_client.get_repo_commits(
                    owner, repo, self.per_page, self.follow_link_header
                ),
                Commit.from_api,
            ),
            self._collect(
                "pulls",
                lambda: self.rest_client.get_closed_pulls(
                    owner, repo, self.per_page, self.follow_link_header
                ),
                PullRequest.from_api,
            ),
            self._collect(
                "branches",
                lambda: self.rest_client.get_branches(owner, repo),
                Branch.from_api,
            ),
            self._collect(
                "contributors",
                lambda: self.rest_client.get_contributors(owner, repo),
                Contributor.from_api,
            ),
        )

        summary = RepoSummary.from_results(full_name, commits, pulls, branches, contributors)
        logger.debug(
            "Summary for %s: %d commits, %d closed PRs, %d branches, %d contributors",
            full_name,
            summary.commit_count,
            summary.closed_pr_count,
            summary.branch_count,
            summary.contributor_count,
        )
        return summary

    async def _collect(
        self,
        resource: str,
        fetch: Callable[[], Awaitable[list[dict[str, Any]]]],
        parse: Callable[[dict[str, Any]], T],
    ) -> FetchResult[T]:
        """Run one resource pipeline, turning SDK and HTTP errors into a failed result."""
        try:
            raw_items = await fetch()
            return FetchResult.ok(resource, _parse_all(resource, raw_items, parse))
        except (RepoPulseError, httpx.HTTPError) as e:
            partial = getattr(e, "partial_items", [])
            logger.warning(
                "Failed to fetch %s (%d items before failure): %s", resource, len(partial), e
            )
            items = _parse_all(resource, partial, parse, strict=False)
            return FetchResult.failed(resource, e, items)


def _parse_all(
    resource: str,
    raw_items: list[Any],
    parse: Callable[[dict[str, Any]], T],
    strict: bool = True,
) -> list[T]:
    """Parse raw API items into models.

    Raises:
        DecodeError: If an item does not decode (only when ``strict``; otherwise
            the item is skipped)
    """
    items = []
    for raw in raw_items:
        try:
            if not isinstance(raw, dict):
                raise ValueError(f"expected an object, got {type(raw).__name__}")
            items.append(parse(raw))
        except (ValueError, TypeError, AttributeError) as e:
            if strict:
                raise DecodeError(f"Malformed {resource} entry: {e}") from e
            logger.debug("Skipping malformed %s entry: %r", resource, raw)
    return items
