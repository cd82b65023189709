"""GitHub authentication and client factory."""

from logging import getLogger

from pydantic import SecretStr

from prtool.conf.github import GitHubSettings
from prtool.errors import CredentialRequired

from .client import GitHubAPIClient

logger = getLogger(__name__)


class GitHubClient:
    """Factory for creating authenticated GitHub API clients."""

    def __init__(self, token: str | None, settings: GitHubSettings | None = None) -> None:
        """Initialize with the resolved token.

        Args:
            token: GitHub Personal Access Token from the effective configuration
            settings: GitHub transport settings (defaults to global settings)
        """
        if settings is None:
            from prtool.settings import settings as global_settings

            settings = global_settings

        self.settings = settings
        self.token = token.strip() if token else ""

    def get_authenticated_client(self) -> GitHubAPIClient:
        """Return an authenticated GitHub API client.

        No request is made here; the token is only checked for presence.

        Raises:
            CredentialRequired: If no token is configured
        """
        if not self.token:
            raise CredentialRequired()

        logger.info("Using personal access token for authentication")
        return GitHubAPIClient(SecretStr(self.token), settings=self.settings)
