from contextlib import AbstractContextManager, nullcontext
from logging import getLogger
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .github.models import PullRequest, RepositoryWarning

logger = getLogger(__name__)


def format_pr_list(
    pull_requests: list[PullRequest],
    warnings: list[RepositoryWarning] | None = None,
    show_urls: bool = False,
) -> None:
    """Display collected pull requests as a Rich table (dry-run output).

    Pull requests are shown in collection order: repository order, then
    the order GitHub listed them in.

    Args:
        pull_requests: Collected pull requests
        warnings: Per-repository warnings to display below the table
        show_urls: Whether to display PR URLs (default: False)
    """
    console = Console()

    if not pull_requests:
        console.print(
            Panel(
                "[yellow]No merged pull requests found for the specified criteria.[/yellow]",
                title="No Results",
                border_style="yellow",
            )
        )
    else:
        table = Table(title="Merged Pull Requests", show_header=True, header_style="bold magenta")

        table.add_column("Repository", style="white")
        table.add_column("PR #", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white", no_wrap=True)
        table.add_column("Merged", style="dim", no_wrap=True)
        table.add_column("Labels", style="green")

        if show_urls:
            table.add_column("URL", style="dim")

        for pr in pull_requests:
            merged_str = pr.merged_at.strftime("%Y-%m-%d") if pr.merged_at else "-"
            row = [
                pr.repository,
                str(pr.number),
                pr.title,
                pr.author,
                merged_str,
                ", ".join(pr.labels) or "-",
            ]
            if show_urls:
                row.append(pr.url)
            table.add_row(*row)

        console.print(table)
        console.print(f"\n[bold]Total:[/bold] {len(pull_requests)} pull requests")

    if warnings:
        format_warnings(warnings, console=console)


def format_warnings(warnings: list[RepositoryWarning], console: Console | None = None) -> None:
    """Print per-repository warnings in a yellow panel."""
    console = console or Console(stderr=True)
    lines = [f"[bold]{warning.repository}[/bold]: {warning.message}" for warning in warnings]
    console.print(
        Panel(
            "\n".join(lines),
            title=f"Skipped {len(warnings)} repositories",
            border_style="yellow",
        )
    )


def show_progress(message: str, enabled: bool = True) -> AbstractContextManager[Any]:
    """Create and return a progress spinner.

    Args:
        message: Message to display with spinner
        enabled: When False (CI mode) a no-op context manager is returned

    Returns:
        Progress context manager
    """
    if not enabled:
        return nullcontext()

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    )
    progress.add_task(description=message, total=None)
    return progress
