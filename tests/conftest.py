"""Pytest configuration and fixtures."""

import asyncio
from typing import Any

import httpx
import pytest

from repo_pulse.config import Config, set_config
from repo_pulse.utils.rate_limiter import reset_rate_limiter

API_URL = "https://api.github.test"


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global state before each test."""
    reset_rate_limiter()
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config():
    """Create a test configuration pointing at the fake API."""
    config = Config(
        github_token="test_token",
        github_api_url=API_URL,
        repo_owner="octocat",
        repo_name="hello",
    )
    set_config(config)
    return config


class FakeGitHub:
    """In-process stand-in for the GitHub REST API, served through httpx.MockTransport.

    Paths with ``per_page``/``page`` query parameters are sliced into pages;
    other requests get the first 30 items, like the real API's default page.
    """

    def __init__(self, data: dict[str, list[Any]] | None = None, link_header: bool = False):
        self.data = data or {}
        self.link_header = link_header
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, int | None], Any] = {}
        self.delays: dict[str, float] = {}
        self.bodies: dict[str, bytes] = {}

    def fail(self, path: str, error: Any, page: int | None = None) -> None:
        """Make ``path`` fail with an exception or an HTTP status (optionally on one page)."""
        self.failures[(path, page)] = error

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        page = int(request.url.params["page"]) if "page" in request.url.params else None

        if path in self.delays:
            await asyncio.sleep(self.delays[path])

        failure = self.failures.get((path, page), self.failures.get((path, None)))
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, int):
            return httpx.Response(failure, json={"message": "Simulated failure"})

        if path in self.bodies:
            return httpx.Response(200, content=self.bodies[path])

        if path not in self.data:
            return httpx.Response(404, json={"message": "Not Found"})

        items = self.data[path]
        headers = {}
        if page is not None:
            per_page = int(request.url.params["per_page"])
            chunk = items[(page - 1) * per_page : page * per_page]
            if self.link_header and page * per_page < len(items):
                next_url = request.url.copy_set_param("page", str(page + 1))
                headers["Link"] = f'<{next_url}>; rel="next"'
        else:
            chunk = items[:30]

        return httpx.Response(200, json=chunk, headers=headers)


def make_items(count: int, prefix: str = "item") -> list[dict[str, Any]]:
    """Build ``count`` minimal API objects."""
    return [{"sha": f"{prefix}{i}", "number": i, "name": f"{prefix}{i}"} for i in range(count)]


def make_contributors(count: int) -> list[dict[str, Any]]:
    return [
        {"login": f"user{i}", "id": i, "contributions": 10 * (i + 1), "site_admin": False}
        for i in range(count)
    ]


@pytest.fixture
def fake_github():
    """Fake API with an empty repository octocat/hello."""
    return FakeGitHub(
        {
            "/repos/octocat/hello/commits": [],
            "/repos/octocat/hello/pulls": [],
            "/repos/octocat/hello/branches": [],
            "/repos/octocat/hello/contributors": [],
        }
    )
