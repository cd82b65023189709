"""Tests for CLI application."""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from prtool.cli import app, syncify
from prtool.errors import AuthenticationFailed
from prtool.services.fetcher import FetchResult
from prtool.services.github.models import PullRequest, RepositoryWarning
from prtool.services.llm import StubSummarizer
from prtool.services.llm.base import STUB_SUMMARY
from prtool.services.scope import OrganizationScope
from prtool.settings import settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """summarize reconfigures the root logger; put the original handlers back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def test_version_command_runs():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert settings.project_name in result.stdout


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("summarize", "init", "version"):
        assert command in result.stdout


def test_syncify_converts_async_to_sync():
    @syncify
    async def test_async_func(x, y):
        await asyncio.sleep(0.01)
        return x + y

    assert test_async_func(10, 20) == 30


def test_syncify_preserves_function_name():
    @syncify
    async def my_function():
        return True

    assert my_function.__name__ == "my_function"


# Tests for init command


def test_init_writes_sample_config(tmp_path: Path):
    target = tmp_path / ".prtool.yaml"

    result = runner.invoke(app, ["init", "--path", str(target)])

    assert result.exit_code == 0
    assert "Configuration file created" in result.stdout
    assert "github_token" in target.read_text()


def test_init_refuses_to_overwrite(tmp_path: Path):
    target = tmp_path / ".prtool.yaml"
    target.write_text("org: mine\n")

    result = runner.invoke(app, ["init", "--path", str(target)])

    assert result.exit_code == 1
    assert target.read_text() == "org: mine\n"


# Tests for summarize command


@pytest.fixture
def config_path(tmp_path: Path) -> str:
    """A config path that does not exist, keeping ~/.prtool.yaml out of the tests."""
    return str(tmp_path / "missing.yaml")


@pytest.fixture
def fetch_result() -> FetchResult:
    return FetchResult(
        selection=OrganizationScope("acme"),
        cutoff=datetime(2024, 3, 8, 12, 0, 0, tzinfo=timezone.utc),
        repositories=["acme/api", "acme/web"],
        pull_requests=[
            PullRequest(
                number=7,
                title="Add retries",
                body="Retries timeouts.",
                author="octocat",
                repository="acme/api",
                url="https://github.com/acme/api/pull/7",
                state="closed",
                created_at=datetime(2024, 3, 9, 9, 0, 0, tzinfo=timezone.utc),
                merged_at=datetime(2024, 3, 10, 9, 0, 0, tzinfo=timezone.utc),
                labels=("enhancement",),
            )
        ],
        warnings=[RepositoryWarning(repository="acme/web", message="Failed to fetch pull requests for acme/web")],
    )


def _mock_pipeline(mock_client_class: MagicMock, mock_fetcher_class: MagicMock, result: FetchResult) -> MagicMock:
    mock_client_class.return_value.get_authenticated_client.return_value = MagicMock()
    mock_fetcher = MagicMock()
    mock_fetcher.fetch = AsyncMock(return_value=result)
    mock_fetcher_class.return_value = mock_fetcher
    return mock_fetcher


def test_summarize_requires_token(config_path: str):
    result = runner.invoke(app, ["summarize", "--org", "acme", "--config", config_path, "--ci"])

    assert result.exit_code == 1
    assert "GitHub token is required" in result.output


def test_summarize_requires_scope(config_path: str):
    result = runner.invoke(app, ["summarize", "--github-token", "t", "--config", config_path, "--ci"])

    assert result.exit_code == 1
    assert "exactly one of" in result.output


def test_summarize_rejects_multiple_scopes(config_path: str):
    result = runner.invoke(
        app,
        ["summarize", "--github-token", "t", "--org", "acme", "--user", "bob", "--config", config_path, "--ci"],
    )

    assert result.exit_code == 1
    assert "only one of" in result.output


def test_summarize_rejects_invalid_since(config_path: str):
    result = runner.invoke(
        app,
        ["summarize", "--github-token", "t", "--org", "acme", "--since", "7d", "--config", config_path, "--ci"],
    )

    assert result.exit_code == 1
    assert "invalid duration" in result.output


@patch("prtool.cli.format_pr_list")
@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_dry_run(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    mock_format: MagicMock,
    fetch_result: FetchResult,
    config_path: str,
):
    mock_fetcher = _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)

    result = runner.invoke(
        app,
        ["summarize", "--github-token", "t", "--org", "acme", "--dry-run", "--show-urls", "--config", config_path, "--ci"],
    )

    assert result.exit_code == 0
    mock_fetcher.fetch.assert_called_once()
    mock_format.assert_called_once()
    call_kwargs = mock_format.call_args.kwargs
    assert call_kwargs["show_urls"] is True
    assert call_kwargs["warnings"] == fetch_result.warnings
    assert "# Pull Request Report" not in result.stdout


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_prints_report(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    fetch_result: FetchResult,
    config_path: str,
):
    _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)

    result = runner.invoke(app, ["summarize", "--github-token", "t", "--org", "acme", "--config", config_path, "--ci"])

    assert result.exit_code == 0
    assert "# Pull Request Report: acme" in result.stdout
    assert STUB_SUMMARY in result.stdout
    assert "[#7 Add retries](https://github.com/acme/api/pull/7)" in result.stdout
    assert "scope: organization" in result.stdout


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_writes_output_file(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    fetch_result: FetchResult,
    config_path: str,
    tmp_path: Path,
):
    _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)
    output = tmp_path / "reports" / "weekly.md"

    result = runner.invoke(
        app,
        ["summarize", "--github-token", "t", "--org", "acme", "--output", str(output), "--config", config_path, "--ci"],
    )

    assert result.exit_code == 0
    assert output.read_text().startswith("---\n")
    assert "# Pull Request Report: acme" not in result.stdout


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_token_from_environment(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    fetch_result: FetchResult,
    config_path: str,
    monkeypatch: pytest.MonkeyPatch,
):
    _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)
    monkeypatch.setenv("PRTOOL_GITHUB_TOKEN", "env-token")

    result = runner.invoke(app, ["summarize", "--org", "acme", "--config", config_path, "--ci"])

    assert result.exit_code == 0
    assert mock_client_class.call_args.args[0] == "env-token"


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_cli_token_overrides_environment(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    fetch_result: FetchResult,
    config_path: str,
    monkeypatch: pytest.MonkeyPatch,
):
    _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)
    monkeypatch.setenv("PRTOOL_GITHUB_TOKEN", "env-token")

    result = runner.invoke(
        app, ["summarize", "--github-token", "cli-token", "--org", "acme", "--config", config_path, "--ci"]
    )

    assert result.exit_code == 0
    assert mock_client_class.call_args.args[0] == "cli-token"


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_config_file_scope(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    fetch_result: FetchResult,
    tmp_path: Path,
):
    mock_fetcher = _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)
    config_file = tmp_path / "prtool.yaml"
    config_file.write_text("github_token: file-token\norg: acme\nsince: -2w\n")

    result = runner.invoke(app, ["summarize", "--config", str(config_file), "--ci"])

    assert result.exit_code == 0
    cfg = mock_fetcher.fetch.call_args.args[0]
    assert cfg.org == "acme"
    assert cfg.since == "-2w"
    assert mock_client_class.call_args.args[0] == "file-token"


@patch("prtool.cli.create_summarizer")
@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_summary_failure_is_not_fatal(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    mock_create_summarizer: MagicMock,
    fetch_result: FetchResult,
    config_path: str,
):
    _mock_pipeline(mock_client_class, mock_fetcher_class, fetch_result)
    mock_create_summarizer.return_value = StubSummarizer(error=RuntimeError("model unavailable"))

    result = runner.invoke(app, ["summarize", "--github-token", "t", "--org", "acme", "--config", config_path, "--ci"])

    assert result.exit_code == 0
    assert "failed to generate summary" in result.output
    assert "## Summary" not in result.stdout
    assert "## Pull Requests" in result.stdout


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_upstream_error_exits(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    config_path: str,
):
    mock_client_class.return_value.get_authenticated_client.return_value = MagicMock()
    mock_fetcher_class.return_value.fetch = AsyncMock(
        side_effect=AuthenticationFailed("listing repositories for organization acme")
    )

    result = runner.invoke(app, ["summarize", "--github-token", "t", "--org", "acme", "--config", config_path, "--ci"])

    assert result.exit_code == 1
    assert "authentication failed" in result.output


@patch("prtool.cli.PullRequestFetcher")
@patch("prtool.cli.GitHubClient")
def test_summarize_unexpected_error_exits(
    mock_client_class: MagicMock,
    mock_fetcher_class: MagicMock,
    config_path: str,
):
    mock_client_class.return_value.get_authenticated_client.return_value = MagicMock()
    mock_fetcher_class.return_value.fetch = AsyncMock(side_effect=RuntimeError("boom"))

    result = runner.invoke(app, ["summarize", "--github-token", "t", "--org", "acme", "--config", config_path, "--ci"])

    assert result.exit_code == 1
    assert "boom" in result.output


def test_summarize_missing_prompt_file(config_path: str, tmp_path: Path):
    result = runner.invoke(
        app,
        [
            "summarize",
            "--github-token",
            "t",
            "--org",
            "acme",
            "--prompt",
            str(tmp_path / "missing-prompt.txt"),
            "--config",
            config_path,
            "--ci",
        ],
    )

    assert result.exit_code == 1
    assert "Failed to read" in result.output
