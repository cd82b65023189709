"""End-to-end retrieval pipeline.

Configuration -> scope validation -> repository enumeration -> pull request
collection, with the cutoff resolved once for the whole run.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging import getLogger
from pathlib import Path

from prtool.conf.config import EffectiveConfig
from prtool.errors import ConfigFileError, SummaryError
from prtool.timewindow import resolve_cutoff

from .github.models import GitHubLister, PullRequest, RepositoryWarning
from .github.pullrequests import PullRequestCollector
from .llm.base import Summarizer
from .scope import ScopeSelection, enumerate_repositories, validate_scope

logger = getLogger(__name__)

DEFAULT_PROMPT = (
    "Summarize the following merged pull requests for an engineering update. "
    "Group related changes, highlight notable features and fixes, and keep it concise.\n\n"
)


@dataclass
class FetchResult:
    """Outcome of one retrieval run."""

    selection: ScopeSelection
    cutoff: datetime
    repositories: list[str]
    pull_requests: list[PullRequest] = field(default_factory=list)
    warnings: list[RepositoryWarning] = field(default_factory=list)


class PullRequestFetcher:
    """Runs the retrieval pipeline against a GitHub client."""

    def __init__(self, github_client: GitHubLister, concurrency: int | None = None) -> None:
        self.github_client = github_client
        self.concurrency = concurrency

    async def fetch(self, cfg: EffectiveConfig, now: datetime | None = None) -> FetchResult:
        """Retrieve merged pull requests for the configured scope and time window.

        Scope, time window and enumeration errors are fatal. Per-repository
        pull request failures are returned as warnings.

        Args:
            cfg: Effective configuration
            now: Reference instant for the time window (default: current UTC time)

        Raises:
            ConfigurationError: If the scope is missing, ambiguous or malformed
            TimeWindowError: If the since expression is invalid
            UpstreamError: If repositories cannot be enumerated
            NoRepositoriesFound: If the scope holds no repositories
        """
        selection = validate_scope(cfg)
        # One cutoff for the whole batch
        cutoff = resolve_cutoff(cfg.since, now or datetime.now(timezone.utc))

        repositories = await enumerate_repositories(selection, self.github_client)

        collector = PullRequestCollector(self.github_client, concurrency=self.concurrency)
        collected = await collector.collect(repositories, cutoff)

        return FetchResult(
            selection=selection,
            cutoff=cutoff,
            repositories=repositories,
            pull_requests=collected.pull_requests,
            warnings=collected.warnings,
        )


def build_context(pull_requests: list[PullRequest]) -> str:
    """Build the plain text handed to a summarizer, one delimited entry per pull request."""
    entries: list[str] = []
    for pr in pull_requests:
        merged = pr.merged_at.strftime("%Y-%m-%d") if pr.merged_at else ""
        entries.append(
            f"Title: {pr.title}\n"
            f"Body: {pr.body}\n"
            f"URL: {pr.url}\n"
            f"Author: {pr.author}\n"
            f"Merged At: {merged}\n"
            f"Labels: {', '.join(pr.labels)}\n"
            "---\n"
        )
    return "".join(entries)


def load_prompt(path: str) -> str:
    """Return the custom prompt stored at ``path``, or the default prompt when no path is set.

    Raises:
        ConfigFileError: If the prompt file cannot be read
    """
    if not path:
        return DEFAULT_PROMPT
    prompt_path = Path(path).expanduser()
    try:
        prompt = prompt_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(str(prompt_path), str(e)) from e
    return prompt.rstrip() + "\n\n"


async def generate_summary(
    summarizer: Summarizer, pull_requests: list[PullRequest], prompt: str = DEFAULT_PROMPT
) -> str:
    """Summarize the pull requests with the given summarizer.

    Raises:
        SummaryError: If the summarizer fails
    """
    context = prompt + build_context(pull_requests)
    logger.info(f"Requesting summary for {len(pull_requests)} pull requests ({len(context)} characters)")
    try:
        return await summarizer.summarize(context)
    except SummaryError:
        raise
    except Exception as e:
        raise SummaryError(f"summarizer failed: {e}") from e
