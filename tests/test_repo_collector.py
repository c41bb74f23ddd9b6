"""Tests for the repository summary collector (fan-out / join)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from conftest import FakeGitHub, make_contributors, make_items

from repo_pulse.exceptions import GitHubAPIError
from repo_pulse.services.github_rest_client import GitHubRestClient
from repo_pulse.services.repo_collector import RepoInfoCollector

COMMITS = "/repos/octocat/hello/commits"
PULLS = "/repos/octocat/hello/pulls"
BRANCHES = "/repos/octocat/hello/branches"
CONTRIBUTORS = "/repos/octocat/hello/contributors"


def make_fake(commits=42, pulls=5, branches=3, contributors=10) -> FakeGitHub:
    return FakeGitHub(
        {
            COMMITS: make_items(commits, "c"),
            PULLS: make_items(pulls, "p"),
            BRANCHES: make_items(branches, "b"),
            CONTRIBUTORS: make_contributors(contributors),
        }
    )


class TestCollectSummary:
    """Tests for collect_summary."""

    @pytest.mark.asyncio
    async def test_counts_42_5_3_10(self, test_config):
        """Test that all four counts land in the summary."""
        fake = make_fake()

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.repository == "octocat/hello"
        assert summary.commit_count == 42
        assert summary.closed_pr_count == 5
        assert summary.branch_count == 3
        assert len(summary.contributors) == 10
        assert summary.errors == {}
        assert summary.is_partial is False

    @pytest.mark.asyncio
    async def test_pulls_requested_with_closed_state(self, test_config):
        """Test that only closed pull requests are requested."""
        fake = make_fake()

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            await RepoInfoCollector(client).collect_summary("octocat", "hello")

        pull_requests = [r for r in fake.requests if r.url.path == PULLS]
        assert pull_requests
        assert all(r.url.params["state"] == "closed" for r in pull_requests)

    @pytest.mark.asyncio
    async def test_branches_and_contributors_not_paginated(self, test_config):
        """Test that branches and contributors are fetched with a single plain request."""
        fake = make_fake(branches=100, contributors=100)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert fake.calls(BRANCHES) == 1
        assert fake.calls(CONTRIBUTORS) == 1
        plain = [r for r in fake.requests if r.url.path in (BRANCHES, CONTRIBUTORS)]
        assert all("page" not in r.url.params for r in plain)
        # The API default page is 30 items
        assert summary.branch_count == 30
        assert len(summary.contributors) == 30

    @pytest.mark.asyncio
    async def test_per_page_is_forwarded(self, test_config):
        """Test that the collector's page size is used for paginated resources."""
        fake = make_fake(commits=25, pulls=4)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client, per_page=10).collect_summary(
                "octocat", "hello"
            )

        assert summary.commit_count == 25
        assert fake.calls(COMMITS) == 3
        assert fake.calls(PULLS) == 1

    @pytest.mark.asyncio
    async def test_contributor_fields_pass_through(self, test_config):
        """Test that unknown contributor fields are preserved."""
        fake = make_fake(contributors=1)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        contributor = summary.contributors[0]
        assert contributor.login == "user0"
        assert contributor.contributions == 10
        assert contributor.model_dump()["site_admin"] is False


class TestFailureIsolation:
    """One failing resource must not affect the others."""

    @pytest.mark.asyncio
    async def test_failed_branches_leave_other_fields_intact(self, test_config):
        fake = make_fake()
        fake.fail(BRANCHES, 500)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.branch_count == 0
        assert summary.commit_count == 42
        assert summary.closed_pr_count == 5
        assert len(summary.contributors) == 10
        assert set(summary.errors) == {"branches"}
        assert "Server error" in summary.errors["branches"]
        assert summary.is_partial is True

    @pytest.mark.asyncio
    async def test_malformed_branches_reported_as_error(self, test_config):
        fake = make_fake()
        fake.bodies[BRANCHES] = b"not json"

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.branch_count == 0
        assert summary.commit_count == 42
        assert "branches" in summary.errors

    @pytest.mark.asyncio
    async def test_malformed_entry_reported_as_error(self, test_config):
        fake = make_fake()
        fake.data[CONTRIBUTORS] = [{"login": "ok"}, "not-an-object"]

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.contributors == []
        assert "contributors" in summary.errors
        assert summary.branch_count == 3

    @pytest.mark.asyncio
    async def test_commit_with_non_object_commit_field(self, test_config):
        fake = make_fake()
        fake.data[COMMITS] = [{"sha": "a", "commit": "oops"}]

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.commit_count == 0
        assert "commits" in summary.errors
        assert summary.closed_pr_count == 5
        assert summary.branch_count == 3
        assert len(summary.contributors) == 10

    @pytest.mark.asyncio
    async def test_pull_with_non_object_user(self, test_config):
        fake = make_fake()
        fake.data[PULLS] = [{"number": 1, "user": ["x"]}]

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.closed_pr_count == 0
        assert "pulls" in summary.errors
        assert summary.commit_count == 42

    @pytest.mark.asyncio
    async def test_bad_entry_in_partial_pages_is_skipped(self, test_config):
        fake = make_fake(commits=250)
        fake.data[COMMITS][5] = {"sha": "bad", "commit": "oops"}
        fake.fail(COMMITS, 500, page=3)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.commit_count == 199
        assert "commits" in summary.errors

    @pytest.mark.asyncio
    async def test_decoding_error_keeps_partial_count(self, test_config):
        fake = make_fake(commits=250)
        fake.fail(COMMITS, httpx.DecodingError("corrupt gzip stream"), page=3)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.commit_count == 200
        assert "commits" in summary.errors

    @pytest.mark.asyncio
    async def test_failed_pagination_keeps_partial_count(self, test_config):
        fake = make_fake(commits=250)
        fake.fail(COMMITS, httpx.ReadError("reset"), page=3)

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.commit_count == 200
        assert "commits" in summary.errors
        assert summary.closed_pr_count == 5

    @pytest.mark.asyncio
    async def test_every_resource_failing_still_resolves(self, test_config):
        fake = FakeGitHub()  # every path is a 404

        async with GitHubRestClient(config=test_config, transport=fake.transport) as client:
            summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.commit_count == 0
        assert summary.closed_pr_count == 0
        assert summary.branch_count == 0
        assert summary.contributors == []
        assert set(summary.errors) == {"commits", "pulls", "branches", "contributors"}


class TestJoin:
    """Tests for the join barrier."""

    @pytest.mark.asyncio
    async def test_waits_for_slowest_fetch(self, test_config):
        """Test that the summary is not delivered before the last fetch completes."""
        release_branches = asyncio.Event()
        client = MagicMock()
        client.get_repo_commits = AsyncMock(return_value=make_items(2))
        client.get_closed_pulls = AsyncMock(return_value=make_items(1))
        client.get_contributors = AsyncMock(return_value=make_contributors(1))

        async def slow_branches(owner, repo):
            await release_branches.wait()
            return make_items(4)

        client.get_branches = slow_branches

        task = asyncio.create_task(RepoInfoCollector(client).collect_summary("octocat", "hello"))
        await asyncio.sleep(0.05)

        assert not task.done()
        client.get_repo_commits.assert_awaited_once()
        client.get_closed_pulls.assert_awaited_once()
        client.get_contributors.assert_awaited_once()

        release_branches.set()
        summary = await asyncio.wait_for(task, timeout=1)

        assert summary.branch_count == 4
        assert summary.commit_count == 2

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self, test_config):
        """Test that all four fetches are in flight at the same time."""
        in_flight = 0
        peak = 0
        gate = asyncio.Event()

        async def fetch(*args, **kwargs):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            if in_flight == 4:
                gate.set()
            await gate.wait()
            in_flight -= 1
            return []

        client = MagicMock()
        client.get_repo_commits = fetch
        client.get_closed_pulls = fetch
        client.get_branches = fetch
        client.get_contributors = fetch

        await asyncio.wait_for(
            RepoInfoCollector(client).collect_summary("octocat", "hello"), timeout=1
        )

        assert peak == 4

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_isolated(self, test_config):
        """Test that two summaries fetched at once do not share results."""
        client = MagicMock()

        async def commits(owner, repo, per_page, follow_link_header):
            await asyncio.sleep(0.01 if repo == "a" else 0)
            return make_items(1 if repo == "a" else 7)

        client.get_repo_commits = commits
        client.get_closed_pulls = AsyncMock(return_value=[])
        client.get_branches = AsyncMock(return_value=[])
        client.get_contributors = AsyncMock(return_value=[])

        collector = RepoInfoCollector(client)
        first, second = await asyncio.gather(
            collector.collect_summary("octocat", "a"),
            collector.collect_summary("octocat", "b"),
        )

        assert (first.repository, first.commit_count) == ("octocat/a", 1)
        assert (second.repository, second.commit_count) == ("octocat/b", 7)

    @pytest.mark.asyncio
    async def test_cancellation_cancels_all_fetches(self, test_config):
        """Test that cancelling the caller cancels pending fetches."""
        cancelled = []

        async def hang(*args, **kwargs):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        client = MagicMock()
        client.get_repo_commits = hang
        client.get_closed_pulls = hang
        client.get_branches = hang
        client.get_contributors = hang

        task = asyncio.create_task(RepoInfoCollector(client).collect_summary("octocat", "hello"))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(cancelled) == 4

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, test_config):
        """Test that programming errors are not turned into partial results."""
        client = MagicMock()
        client.get_repo_commits = AsyncMock(side_effect=RuntimeError("bug"))
        client.get_closed_pulls = AsyncMock(return_value=[])
        client.get_branches = AsyncMock(return_value=[])
        client.get_contributors = AsyncMock(return_value=[])

        with pytest.raises(RuntimeError, match="bug"):
            await RepoInfoCollector(client).collect_summary("octocat", "hello")

    @pytest.mark.asyncio
    async def test_api_error_message_recorded(self, test_config):
        client = MagicMock()
        client.get_repo_commits = AsyncMock(return_value=[])
        client.get_closed_pulls = AsyncMock(
            side_effect=GitHubAPIError("API error: Bad credentials", status_code=401)
        )
        client.get_branches = AsyncMock(return_value=[])
        client.get_contributors = AsyncMock(return_value=[])

        summary = await RepoInfoCollector(client).collect_summary("octocat", "hello")

        assert summary.errors == {"pulls": "API error: Bad credentials"}
