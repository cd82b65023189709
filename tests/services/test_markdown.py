"""Tests for markdown report rendering."""

from datetime import datetime, timezone

import pytest

from prtool.services.github.models import PullRequest, RepositoryWarning
from prtool.services.markdown import ReportMetadata, render_markdown


def _pr(number: int, repository: str, body: str = "", labels: tuple[str, ...] = ()) -> PullRequest:
    return PullRequest(
        number=number,
        title=f"Change {number}",
        body=body,
        author="octocat",
        repository=repository,
        url=f"https://github.com/{repository}/pull/{number}",
        state="closed",
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        merged_at=datetime(2024, 3, 10, 8, 30, tzinfo=timezone.utc),
        labels=labels,
    )


@pytest.fixture
def metadata() -> ReportMetadata:
    return ReportMetadata(
        generated_at=datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc),
        scope="organization",
        scope_value="acme",
        since="-7d",
        total_prs=3,
        repositories=["acme/api", "acme/web"],
        llm_provider="stub",
    )


def test_front_matter(metadata: ReportMetadata) -> None:
    report = render_markdown(metadata, [])

    assert report.startswith(
        "---\n"
        "generated_at: 2024-03-15T12:00:00Z\n"
        "scope: organization\n"
        "scope_value: acme\n"
        "since: -7d\n"
        "total_prs: 3\n"
        "repositories:\n"
        "  - acme/api\n"
        "  - acme/web\n"
        "llm_provider: stub\n"
        "---\n"
    )
    assert "llm_model" not in report


def test_empty_repositories_list() -> None:
    metadata = ReportMetadata(
        generated_at=datetime(2024, 3, 15, tzinfo=timezone.utc),
        scope="user",
        scope_value="octocat",
        since="-1w",
        total_prs=0,
    )

    report = render_markdown(metadata, [])

    assert "repositories: []\n" in report
    assert "No merged pull requests found in this time window." in report
    assert "## Summary" not in report


def test_groups_by_repository_in_order(metadata: ReportMetadata) -> None:
    prs = [_pr(1, "acme/web"), _pr(2, "acme/api"), _pr(3, "acme/web")]

    report = render_markdown(metadata, prs)

    web = report.index("### acme/web")
    api = report.index("### acme/api")
    assert web < api
    assert report.index("#1 Change 1") < report.index("#3 Change 3") < api
    assert report.count("### acme/web") == 1


def test_entry_line(metadata: ReportMetadata) -> None:
    report = render_markdown(metadata, [_pr(42, "acme/api", body="First line\n\nSecond line", labels=("bug", "ui"))])

    assert "- [#42 Change 42](https://github.com/acme/api/pull/42) by @octocat (merged 2024-03-10)\n" in report
    assert "  Labels: bug, ui\n" in report
    assert "  First line\n\n  Second line\n" in report


def test_summary_section(metadata: ReportMetadata) -> None:
    report = render_markdown(metadata, [_pr(1, "acme/api")], summary="Shipped things.\n")

    assert "# Pull Request Report: acme\n\n## Summary\n\nShipped things.\n\n## Pull Requests\n" in report


def test_warnings_section(metadata: ReportMetadata) -> None:
    warnings = [RepositoryWarning(repository="acme/web", message="HTTP 500")]

    report = render_markdown(metadata, [_pr(1, "acme/api")], warnings=warnings)

    assert "## Warnings\n\n- acme/web: HTTP 500\n" in report
    assert report.endswith("\n")
    assert not report.endswith("\n\n")
