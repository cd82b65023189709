import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from functools import wraps
from logging import getLogger
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from .conf.config import PartialConfig, load_config, write_sample_config
from .errors import PRToolError, SummaryError
from .logs import configure_logging
from .services.fetcher import PullRequestFetcher, generate_summary, load_prompt
from .services.formatter import format_pr_list, format_warnings, show_progress
from .services.github.auth import GitHubClient
from .services.llm import create_summarizer
from .services.markdown import ReportMetadata, render_markdown
from .settings import settings

app = typer.Typer()
logger = getLogger(__name__)
console = Console()
err_console = Console(stderr=True)


def syncify(f: Callable[..., Any]) -> Callable[..., Any]:
    """This simple decorator converts an async function into a sync function,
    allowing it to work with Typer.
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


@app.command(help=f"Display the current installed version of {settings.project_name}.")
def version() -> None:
    from . import __version__

    typer.echo(f"{settings.project_name} - {__version__}")


@app.command(help="Generate an annotated .prtool.yaml in the current directory.")
def init(
    path: Path = typer.Option(
        Path(".prtool.yaml"),
        "--path",
        help="Where to write the sample configuration",
    ),
) -> None:
    try:
        written = write_sample_config(path)
    except PRToolError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    typer.echo(f"Configuration file created: {written}")
    typer.echo(f"Edit this file to customize your {settings.project_name} settings.")


@app.command(help="Fetch merged pull requests for one scope and summarize them as markdown.")
@syncify
async def summarize(
    config: str | None = typer.Option(
        None,
        "--config",
        help=f"Configuration file (default: {settings.default_config_path})",
    ),
    github_token: str | None = typer.Option(
        None,
        "--github-token",
        help="GitHub Personal Access Token (overrides PRTOOL_GITHUB_TOKEN)",
    ),
    org: str | None = typer.Option(None, "--org", help="GitHub organization"),
    team: list[str] | None = typer.Option(
        None,
        "--team",
        help="GitHub team as org/team. Repeat or comma-separate for several teams",
    ),
    user: str | None = typer.Option(None, "--user", help="GitHub user"),
    repo: str | None = typer.Option(None, "--repo", help="GitHub repository (format: owner/repo)"),
    since: str | None = typer.Option(
        None,
        "--since",
        help="Time window, e.g. -7d, -2w, -1m, -1yr (default: -7d)",
    ),
    llm_provider: str | None = typer.Option(None, "--llm-provider", help="Summarizer: stub, openai or ollama"),
    llm_api_key: str | None = typer.Option(None, "--llm-api-key", help="API key for the summarizer"),
    llm_model: str | None = typer.Option(None, "--llm-model", help="Model name for the summarizer"),
    prompt: str | None = typer.Option(None, "--prompt", help="Path to a custom prompt file"),
    output: str | None = typer.Option(None, "--output", help="Write the report to this file instead of stdout"),
    log_file: str | None = typer.Option(None, "--log-file", help="Append logs to this file"),
    dry_run: bool | None = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Skip summarization and show the collected pull requests",
    ),
    verbose: bool | None = typer.Option(None, "--verbose/--no-verbose", help="Enable informational logging"),
    ci: bool | None = typer.Option(None, "--ci/--no-ci", help="Non-interactive mode for CI"),
    show_urls: bool = typer.Option(False, "--show-urls", help="Display PR URLs in dry-run output"),
) -> None:
    """Fetch merged pull requests for one scope and summarize them as markdown."""
    cli_config = PartialConfig(
        github_token=github_token,
        org=org,
        team=team,
        user=user,
        repo=repo,
        since=since,
        llm_provider=llm_provider,
        llm_api_key=llm_api_key,
        llm_model=llm_model,
        prompt=prompt,
        output=output,
        log_file=log_file,
        dry_run=dry_run,
        verbose=verbose,
        ci=ci,
    )

    try:
        cfg = load_config(cli_config, config or settings.default_config_path)
        configure_logging(verbose=cfg.verbose, ci=cfg.ci, log_file=cfg.log_file)
        prompt_text = load_prompt(cfg.prompt)

        github_client = GitHubClient(cfg.github_token, settings=settings).get_authenticated_client()
        async with github_client:
            with show_progress("Fetching pull requests...", enabled=not cfg.ci):
                result = await PullRequestFetcher(github_client).fetch(cfg)
    except PRToolError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Unexpected error during pull request collection")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    logger.info(f"Fetched {len(result.pull_requests)} pull requests from {len(result.repositories)} repositories")

    if cfg.dry_run:
        format_pr_list(result.pull_requests, warnings=result.warnings, show_urls=show_urls)
        return

    if result.warnings:
        format_warnings(result.warnings)

    summary = ""
    if result.pull_requests:
        summarizer = create_summarizer(cfg, ollama_base_url=settings.ollama_base_url)
        try:
            with show_progress("Generating summary...", enabled=not cfg.ci):
                summary = await generate_summary(summarizer, result.pull_requests, prompt=prompt_text)
        except SummaryError as e:
            logger.warning(f"Failed to generate summary: {e}")
            err_console.print(f"[yellow]Warning:[/yellow] failed to generate summary: {escape(str(e))}")

    metadata = ReportMetadata(
        generated_at=datetime.now(timezone.utc),
        scope=result.selection.kind,
        scope_value=result.selection.value,
        since=cfg.since,
        total_prs=len(result.pull_requests),
        repositories=result.repositories,
        llm_provider=cfg.llm_provider,
        llm_model=cfg.llm_model,
    )
    report = render_markdown(metadata, result.pull_requests, summary=summary, warnings=result.warnings)

    if cfg.output:
        try:
            _write_report(cfg.output, report)
        except OSError as e:
            err_console.print(f"[red]Error:[/red] failed to write {escape(cfg.output)}: {escape(str(e))}")
            raise typer.Exit(1)
        if not cfg.ci:
            err_console.print(f"Report written to {escape(cfg.output)}")
    else:
        typer.echo(report, nl=False)


def _write_report(path: str, content: str) -> None:
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")


if __name__ == "__main__":
    app()
