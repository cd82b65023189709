"""In-memory GitHub client used as a test double.

Serves repositories and pull requests from dictionaries, paginates them
with a configurable page size and records every call in ``calls``.
"""

from typing import Any

import httpx

from .models import Page


def http_error(status_code: int, url: str = "https://api.github.com/") -> httpx.HTTPStatusError:
    """Build the error httpx raises for a response with ``status_code``."""
    request = httpx.Request("GET", url)
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


def _repo_item(full_name: str) -> dict[str, Any]:
    owner, _, name = full_name.partition("/")
    return {"full_name": full_name, "name": name, "owner": {"login": owner}}


class InMemoryGitHubClient:
    """RepositoryLister and PullRequestLister backed by plain data."""

    def __init__(
        self,
        org_repos: dict[str, list[str]] | None = None,
        user_repos: dict[str, list[str]] | None = None,
        team_repos: dict[str, list[str]] | None = None,
        pull_requests: dict[str, list[dict[str, Any]]] | None = None,
        page_size: int = 100,
    ) -> None:
        self.org_repos = org_repos or {}
        self.user_repos = user_repos or {}
        # Keyed by "org/team-slug"
        self.team_repos = team_repos or {}
        # Keyed by "owner/repo", in listing order
        self.pull_requests = pull_requests or {}
        self.page_size = page_size
        # Keyed by "<method>:<target>", e.g. "list_pull_requests:acme/api"
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []

    async def __aenter__(self) -> "InMemoryGitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None

    def fail(self, method: str, target: str, error: Exception) -> None:
        """Make ``method`` raise ``error`` whenever it is called for ``target``."""
        self.errors[f"{method}:{target}"] = error

    def _record(self, method: str, target: str, page: int | None = None) -> None:
        suffix = f", page={page}" if page is not None else ""
        self.calls.append(f"{method}({target}{suffix})")
        error = self.errors.get(f"{method}:{target}")
        if error is not None:
            raise error

    def _page(self, items: list[dict[str, Any]], page: int) -> Page:
        start = (page - 1) * self.page_size
        chunk = items[start : start + self.page_size]
        has_next = start + self.page_size < len(items)
        return Page(items=chunk, has_next=has_next, next_page=page + 1 if has_next else None)

    async def list_repositories_for_org(self, org: str, page: int = 1) -> Page:
        self._record("list_repositories_for_org", org, page)
        return self._page([_repo_item(name) for name in self.org_repos.get(org, [])], page)

    async def list_repositories_for_user(self, user: str, page: int = 1) -> Page:
        self._record("list_repositories_for_user", user, page)
        return self._page([_repo_item(name) for name in self.user_repos.get(user, [])], page)

    async def list_repositories_for_team(self, org: str, team_slug: str, page: int = 1) -> Page:
        team = f"{org}/{team_slug}"
        self._record("list_repositories_for_team", team, page)
        return self._page([_repo_item(name) for name in self.team_repos.get(team, [])], page)

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        full_name = f"{owner}/{repo}"
        self._record("get_repository", full_name)
        known = {name for names in self.org_repos.values() for name in names}
        known.update(name for names in self.user_repos.values() for name in names)
        known.update(name for names in self.team_repos.values() for name in names)
        known.update(self.pull_requests)
        if full_name not in known:
            raise http_error(404, f"https://api.github.com/repos/{full_name}")
        return _repo_item(full_name)

    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        state: str = "closed",
        sort: str = "updated",
        direction: str = "desc",
        page: int = 1,
    ) -> Page:
        full_name = f"{owner}/{repo}"
        self._record("list_pull_requests", full_name, page)
        items = [item for item in self.pull_requests.get(full_name, []) if state == "all" or item["state"] == state]
        return self._page(items, page)
