import os

# Keep a developer's real environment out of configuration tests
for _key in [key for key in os.environ if key.startswith("PRTOOL_")]:
    del os.environ[_key]

from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import SecretStr

from prtool.conf.github import GitHubSettings
from prtool.services.github.client import GitHubAPIClient
from prtool.services.github.memory import InMemoryGitHubClient

NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_pr_item(
    number: int,
    merged_at: str | None,
    state: str = "closed",
    updated_at: str | None = None,
    title: str | None = None,
    labels: list[str] | None = None,
    repository: str = "acme/api",
) -> dict[str, Any]:
    """Build a GitHub pull request payload as returned by the pulls endpoint."""
    return {
        "number": number,
        "title": title or f"PR {number}",
        "body": f"Body of PR {number}",
        "state": state,
        "user": {"login": "octocat"},
        "created_at": "2024-03-01T09:00:00Z",
        "updated_at": updated_at or merged_at or "2024-03-01T09:00:00Z",
        "merged_at": merged_at,
        "html_url": f"https://github.com/{repository}/pull/{number}",
        "labels": [{"name": name} for name in labels or []],
    }


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def github_settings() -> GitHubSettings:
    return GitHubSettings(github_max_retries=0)


@pytest.fixture
def mock_client(github_settings: GitHubSettings) -> GitHubAPIClient:
    """Create a test GitHub API client for mocking."""
    return GitHubAPIClient(token=SecretStr("test_token"), settings=github_settings)


@pytest.fixture
def memory_client() -> InMemoryGitHubClient:
    return InMemoryGitHubClient()


@pytest.fixture
def pr_item():
    """Factory fixture for GitHub pull request payloads."""
    return make_pr_item
