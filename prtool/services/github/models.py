from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True)
class Page:
    """One page of a paginated GitHub listing."""

    items: list[dict[str, Any]]
    has_next: bool
    next_page: int | None = None


@dataclass(frozen=True)
class PullRequest:
    """Domain model for a merged pull request."""

    number: int
    title: str
    body: str
    author: str
    repository: str
    url: str
    state: str
    created_at: datetime
    merged_at: datetime | None
    labels: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RepositoryWarning:
    """Non-fatal per-repository failure recorded during collection."""

    repository: str
    message: str


class RepositoryLister(Protocol):
    async def list_repositories_for_org(self, org: str, page: int = 1) -> Page: ...

    async def list_repositories_for_user(self, user: str, page: int = 1) -> Page: ...

    async def list_repositories_for_team(self, org: str, team_slug: str, page: int = 1) -> Page: ...

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]: ...


class PullRequestLister(Protocol):
    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        state: str = "closed",
        sort: str = "updated",
        direction: str = "desc",
        page: int = 1,
    ) -> Page: ...


class GitHubLister(RepositoryLister, PullRequestLister, Protocol):
    """A client that lists both repositories and pull requests."""
