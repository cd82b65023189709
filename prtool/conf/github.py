from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitHubSettings(BaseSettings):
    """GitHub API transport settings."""

    model_config = SettingsConfigDict(env_prefix="PRTOOL_", extra="ignore")

    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL for the GitHub REST API",
    )
    github_timeout: float = Field(
        default=30.0,
        description="Read timeout in seconds for GitHub API requests",
    )
    github_connect_timeout: float = Field(
        default=10.0,
        description="Connect timeout in seconds for GitHub API requests",
    )
    github_max_retries: int = Field(
        default=3,
        description="Retries for timed out or 502/503/504 GitHub API requests",
    )
    github_per_page: int = Field(
        default=100,
        description="Page size for paginated GitHub API listings (max 100)",
    )
    github_fetch_concurrency: int = Field(
        default=5,
        description="Maximum number of repositories whose pull requests are fetched concurrently",
    )

    @field_validator("github_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("github_max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("github_max_retries must not be negative")
        return v

    @field_validator("github_per_page")
    @classmethod
    def validate_per_page(cls, v: int) -> int:
        """GitHub caps page size at 100."""
        if not 1 <= v <= 100:
            raise ValueError("github_per_page must be between 1 and 100")
        return v

    @field_validator("github_fetch_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if not 1 <= v <= 50:
            raise ValueError("github_fetch_concurrency must be between 1 and 50")
        return v


@lru_cache
def get_github_settings() -> GitHubSettings:
    return GitHubSettings()
