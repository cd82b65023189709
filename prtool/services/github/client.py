"""Async GitHub API client using httpx."""

import asyncio
from logging import getLogger
from typing import Any

import httpx
from pydantic import SecretStr

from prtool.conf.github import GitHubSettings, get_github_settings
from prtool.errors import AuthenticationFailed, UpstreamError, UpstreamTransportError

from .models import Page

logger = getLogger(__name__)

RETRYABLE_STATUS_CODES = (502, 503, 504)


def _next_page(response: httpx.Response) -> int | None:
    """Extract the next page number from the response's Link header."""
    next_link = response.links.get("next")
    if not next_link or "url" not in next_link:
        return None
    page = httpx.URL(next_link["url"]).params.get("page")
    if page is None or not page.isdigit():
        return None
    return int(page)


class GitHubAPIClient:
    """Async GitHub API client for listing repositories and pull requests."""

    def __init__(self, token: SecretStr, settings: GitHubSettings | None = None) -> None:
        """Initialize GitHub API client.

        Args:
            token: GitHub Personal Access Token
            settings: Transport settings (defaults to environment-derived settings)
        """
        self.settings = settings or get_github_settings()
        self.token = token.get_secret_value()
        self.base_url = self.settings.github_api_url
        self.per_page = self.settings.github_per_page
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GitHubAPIClient":
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=httpx.Timeout(self.settings.github_timeout, connect=self.settings.github_connect_timeout),
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        retry_count: int = 0,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make HTTP request with automatic retry on timeouts and gateway errors.

        Rate limited responses are not waited out; they are raised like any other error.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: URL to request
            retry_count: Current retry attempt (internal use)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            httpx.Response object

        Raises:
            httpx.HTTPStatusError: If the request fails after retries
            httpx.TimeoutException: If request times out after retries
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use async with context manager")

        max_retries = self.settings.github_max_retries
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response

        except httpx.TimeoutException:
            if retry_count < max_retries:
                wait_time = 2**retry_count  # 1, 2, 4 seconds
                logger.warning(
                    f"Timeout on {method} {url} (attempt {retry_count + 1}/{max_retries}). "
                    f"Waiting {wait_time} seconds before retry..."
                )
                await asyncio.sleep(wait_time)
                return await self._request_with_retry(method, url, retry_count + 1, **kwargs)
            logger.error(f"{method} {url} failed after {max_retries} retries due to timeout")
            raise

        except httpx.HTTPStatusError as e:
            if e.response.status_code in RETRYABLE_STATUS_CODES and retry_count < max_retries:
                wait_time = 2**retry_count
                logger.warning(
                    f"HTTP {e.response.status_code} on {method} {url} (attempt {retry_count + 1}/{max_retries}). "
                    f"Waiting {wait_time} seconds before retry..."
                )
                await asyncio.sleep(wait_time)
                return await self._request_with_retry(method, url, retry_count + 1, **kwargs)
            raise

    async def _get_page(self, path: str, page: int, params: dict[str, str | int] | None = None) -> Page:
        query: dict[str, str | int] = dict(params or {})
        query["per_page"] = self.per_page
        query["page"] = page

        response = await self._request_with_retry("GET", f"{self.base_url}{path}", params=query)
        items: list[dict[str, Any]] = response.json()
        next_page = _next_page(response)
        return Page(items=items, has_next=next_page is not None, next_page=next_page)

    async def list_repositories_for_org(self, org: str, page: int = 1) -> Page:
        """List one page of repositories for an organization.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        return await self._get_page(f"/orgs/{org}/repos", page, {"type": "all"})

    async def list_repositories_for_user(self, user: str, page: int = 1) -> Page:
        """List one page of repositories owned by a user.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        return await self._get_page(f"/users/{user}/repos", page, {"type": "owner"})

    async def list_repositories_for_team(self, org: str, team_slug: str, page: int = 1) -> Page:
        """List one page of repositories a team has access to.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        return await self._get_page(f"/orgs/{org}/teams/{team_slug}/repos", page)

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Get public information about a GitHub repository.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name

        Returns:
            Repository data dictionary including full_name

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response = await self._request_with_retry("GET", f"{self.base_url}/repos/{owner}/{repo}")
        result: dict[str, Any] = response.json()
        return result

    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        state: str = "closed",
        sort: str = "updated",
        direction: str = "desc",
        page: int = 1,
    ) -> Page:
        """List one page of pull requests for a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            state: Pull request state filter (open, closed, all)
            sort: Sort field (created, updated, popularity, long-running)
            direction: Sort direction (asc, desc)
            page: Page number

        Raises:
            httpx.HTTPStatusError: If the request fails after retries
        """
        return await self._get_page(
            f"/repos/{owner}/{repo}/pulls",
            page,
            {"state": state, "sort": sort, "direction": direction},
        )


def wrap_upstream_error(error: Exception, context: str) -> UpstreamError:
    """Translate an httpx error into the prtool error taxonomy.

    Args:
        error: Exception raised by the HTTP layer
        context: What was being done, e.g. "listing repositories for organization acme"

    Returns:
        AuthenticationFailed for HTTP 401, UpstreamTransportError otherwise
    """
    if isinstance(error, UpstreamError):
        return error
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        if status_code == 401:
            return AuthenticationFailed(context)
        remaining = error.response.headers.get("X-RateLimit-Remaining", "")
        if status_code == 429 or (status_code == 403 and remaining == "0"):
            return UpstreamTransportError(context, "rate limit exceeded", status_code)
        return UpstreamTransportError(context, str(error), status_code)
    if isinstance(error, httpx.TimeoutException):
        return UpstreamTransportError(context, "request timed out")
    return UpstreamTransportError(context, str(error) or type(error).__name__)
