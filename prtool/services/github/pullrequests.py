"""Service for collecting merged pull requests across repositories."""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import Any

from prtool.conf.github import get_github_settings
from prtool.errors import RepositoryFetchFailed

from .client import wrap_upstream_error
from .models import PullRequest, PullRequestLister, RepositoryWarning

logger = getLogger(__name__)


@dataclass
class CollectionResult:
    """Pull requests collected for a batch of repositories plus per-repository warnings."""

    pull_requests: list[PullRequest] = field(default_factory=list)
    warnings: list[RepositoryWarning] = field(default_factory=list)


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_pull_request(item: dict[str, Any], repository: str) -> PullRequest:
    """Convert a GitHub pull request payload into a PullRequest.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a timestamp cannot be parsed
    """
    created_at = parse_timestamp(item["created_at"])
    if created_at is None:
        raise ValueError(f"pull request {repository}#{item.get('number')} has no creation timestamp")

    user = item.get("user") or {}
    labels = tuple(label["name"] for label in item.get("labels") or [] if label.get("name"))

    return PullRequest(
        number=item["number"],
        title=item.get("title") or "",
        body=item.get("body") or "",
        author=user.get("login", ""),
        repository=repository,
        url=item.get("html_url") or "",
        state=item["state"],
        created_at=created_at,
        merged_at=parse_timestamp(item.get("merged_at")),
        labels=labels,
    )


def is_merged_after(pr: PullRequest, cutoff: datetime) -> bool:
    """A pull request qualifies iff it is closed and merged strictly after the cutoff."""
    return pr.state == "closed" and pr.merged_at is not None and pr.merged_at > cutoff


def _page_is_exhausted(items: list[dict[str, Any]], cutoff: datetime) -> bool:
    """True when every item on the page was last updated at or before the cutoff.

    Listings are sorted by update time, newest first, and a merge always
    updates the pull request, so no later page can hold a qualifying merge.
    """
    if not items:
        return True
    for item in items:
        updated_at = parse_timestamp(item.get("updated_at"))
        if updated_at is None or updated_at > cutoff:
            return False
    return True


class PullRequestCollector:
    """Service for collecting merged pull requests from a set of repositories."""

    def __init__(self, github_client: PullRequestLister, concurrency: int | None = None) -> None:
        """Initialize the pull request collector.

        Args:
            github_client: Authenticated GitHub API client or any PullRequestLister
            concurrency: Maximum repositories fetched at once (default from settings)
        """
        self.github_client = github_client
        self.concurrency = concurrency or get_github_settings().github_fetch_concurrency

    async def fetch_repository(self, repository: str, cutoff: datetime) -> list[PullRequest]:
        """Fetch the pull requests of one repository merged after ``cutoff``.

        Raises:
            RepositoryFetchFailed: If any page request fails or the payload is malformed
        """
        owner, _, name = repository.partition("/")
        pull_requests: list[PullRequest] = []
        page = 1

        try:
            while True:
                result = await self.github_client.list_pull_requests(
                    owner, name, state="closed", sort="updated", direction="desc", page=page
                )
                for item in result.items:
                    pr = parse_pull_request(item, repository)
                    if is_merged_after(pr, cutoff):
                        pull_requests.append(pr)

                if not result.has_next:
                    break
                if _page_is_exhausted(result.items, cutoff):
                    logger.debug(f"Stopping pagination for {repository} at page {page}: no newer updates")
                    break
                page = result.next_page or page + 1
        except (KeyError, ValueError, TypeError) as e:
            raise RepositoryFetchFailed(repository, e) from e
        except Exception as e:
            raise RepositoryFetchFailed(repository, wrap_upstream_error(e, f"listing pull requests for {repository}")) from e

        logger.debug(f"Collected {len(pull_requests)} merged pull requests from {repository} ({page} pages)")
        return pull_requests

    async def collect(self, repositories: list[str], cutoff: datetime) -> CollectionResult:
        """Collect merged pull requests for every repository.

        A failing repository is skipped and reported as a warning; it never
        aborts the batch. Results keep repository order, then listing order.

        Args:
            repositories: Repository full names in enumeration order
            cutoff: Only pull requests merged strictly after this instant are kept

        Returns:
            CollectionResult with the pull requests and any per-repository warnings
        """
        collection_start_time = time.time()
        logger.info(
            f"Collecting pull requests merged after {cutoff.isoformat()} from {len(repositories)} repositories "
            f"with concurrency limit of {self.concurrency}"
        )

        semaphore = asyncio.Semaphore(self.concurrency)

        async def fetch_with_semaphore(repository: str) -> list[PullRequest] | RepositoryFetchFailed:
            async with semaphore:
                try:
                    return await self.fetch_repository(repository, cutoff)
                except RepositoryFetchFailed as e:
                    logger.warning(str(e))
                    return e

        # gather keeps one result slot per repository, in input order
        outcomes = await asyncio.gather(*[fetch_with_semaphore(repository) for repository in repositories])

        result = CollectionResult()
        for repository, outcome in zip(repositories, outcomes):
            if isinstance(outcome, RepositoryFetchFailed):
                result.warnings.append(RepositoryWarning(repository=repository, message=str(outcome)))
            else:
                result.pull_requests.extend(outcome)

        total_duration = time.time() - collection_start_time
        logger.info(
            f"PR collection completed in {total_duration:.2f}s: {len(result.pull_requests)} PRs collected, "
            f"{len(result.warnings)} repositories failed"
        )
        return result
