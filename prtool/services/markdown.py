"""Markdown report rendering."""

from dataclasses import dataclass, field
from datetime import datetime

from .github.models import PullRequest, RepositoryWarning


@dataclass
class ReportMetadata:
    generated_at: datetime
    scope: str
    scope_value: str
    since: str
    total_prs: int
    repositories: list[str] = field(default_factory=list)
    llm_provider: str = ""
    llm_model: str = ""


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(f"{prefix}{line}" if line.strip() else "" for line in text.strip().splitlines())


def render_markdown(
    metadata: ReportMetadata,
    pull_requests: list[PullRequest],
    summary: str = "",
    warnings: list[RepositoryWarning] | None = None,
) -> str:
    """Render the report as markdown with a front matter block.

    Pull requests are grouped by repository; groups appear in the order
    the repositories first appear in ``pull_requests``.
    """
    lines = [
        "---",
        f"generated_at: {metadata.generated_at.strftime('%Y-%m-%dT%H:%M:%SZ')}",
        f"scope: {metadata.scope}",
        f"scope_value: {metadata.scope_value}",
        f"since: {metadata.since}",
        f"total_prs: {metadata.total_prs}",
    ]
    if metadata.repositories:
        lines.append("repositories:")
        lines.extend(f"  - {repository}" for repository in metadata.repositories)
    else:
        lines.append("repositories: []")
    if metadata.llm_provider:
        lines.append(f"llm_provider: {metadata.llm_provider}")
    if metadata.llm_model:
        lines.append(f"llm_model: {metadata.llm_model}")
    lines.extend(["---", "", f"# Pull Request Report: {metadata.scope_value}", ""])

    if summary:
        lines.extend(["## Summary", "", summary.strip(), ""])

    lines.extend(["## Pull Requests", ""])
    if not pull_requests:
        lines.extend(["No merged pull requests found in this time window.", ""])

    grouped: dict[str, list[PullRequest]] = {}
    for pr in pull_requests:
        grouped.setdefault(pr.repository, []).append(pr)

    for repository, prs in grouped.items():
        lines.extend([f"### {repository}", ""])
        for pr in prs:
            merged = pr.merged_at.strftime("%Y-%m-%d") if pr.merged_at else "unmerged"
            lines.append(f"- [#{pr.number} {pr.title}]({pr.url}) by @{pr.author} (merged {merged})")
            if pr.labels:
                lines.append(f"  Labels: {', '.join(pr.labels)}")
            if pr.body.strip():
                lines.append("")
                lines.append(_indent(pr.body))
                lines.append("")
        lines.append("")

    if warnings:
        lines.extend(["## Warnings", ""])
        lines.extend(f"- {warning.repository}: {warning.message}" for warning in warnings)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
